"""
Help Manager

Manages help text for the command line interface.
"""

from pathlib import Path
from typing import Optional


class HelpManager:
    """Manages help text and documentation"""

    def __init__(self, help_dir: Optional[Path] = None):
        self.help_dir = Path(help_dir) if help_dir else Path(__file__).parent / "help"

    def get_help(self, topic: str) -> str:
        """Get help text for a specific topic"""
        # Convert dashes to underscores for file names
        topic_file = topic.replace('-', '_')
        help_file = self.help_dir / f"{topic_file}_help.txt"

        if help_file.exists():
            with open(help_file, 'r') as f:
                return f.read()
        else:
            return f"No help available for: {topic}"

    def get_main_help(self) -> str:
        return self.get_help("main")

    def get_examples(self) -> str:
        return self.get_help("examples")

    def show_help(self, topic: Optional[str] = None) -> None:
        """Show help for a topic, or the main help if no topic is given"""
        if topic is None:
            print(self.get_main_help())
        else:
            print(self.get_help(topic))

    def show_examples(self) -> None:
        print(self.get_examples())
