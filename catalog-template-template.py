#!/usr/bin/env python3
"""
Catalog Template Template Entry Point

This script provides a simple entry point for the catalog template generator.
All application logic is contained in the libs.main_app module.
"""

import sys
from pathlib import Path

# Add the package root to the Python path
package_root = Path(__file__).parent / "catalog-template-template"
sys.path.insert(0, str(package_root))

# Logging will be configured by main_app.main()

if __name__ == "__main__":
    try:
        from libs.main_app import main
    except ImportError as e:
        print(f"Error importing main application: {e}")
        print("Please ensure dependencies are installed: pip install -e .")
        sys.exit(1)
    main()
