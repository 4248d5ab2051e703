#!/usr/bin/env python3
"""
Number Mask - Entry Point Module

Handles dependency checking, argument parsing and startup of the demo
application.
"""

import argparse
import sys
import time
import traceback
from pathlib import Path
from typing import Optional, List


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Number Mask - locale-aware amount input demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python .                        # Start the demo
  python . --check-deps           # Check dependencies only
  python . --locale de-DE         # Start with a German amount field
  python . --debug --log-dir ./logs
        """
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="Number Mask 1.0.0"
    )
    parser.add_argument(
        "--check-deps", "-c",
        action="store_true",
        help="Check dependencies and exit"
    )
    parser.add_argument(
        "--locale", "-l",
        type=str,
        help="Locale tag for the masked field (default: last used, then en-US)"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        help="Custom directory for log files"
    )

    return parser.parse_args(argv)


def diagnose_pyside6() -> bool:
    """Diagnose PySide6 installation issues."""
    print("\nDiagnosing PySide6 installation...")
    try:
        import PySide6
        print(f"   OK PySide6 package found at: {PySide6.__file__}")
        for component in ("QtCore", "QtGui", "QtWidgets"):
            try:
                __import__(f"PySide6.{component}")
                print(f"   OK {component} imported successfully")
            except ImportError as e:
                print(f"   ERROR {component} import failed: {e}")
                return False
        return True
    except ImportError:
        print("   ERROR PySide6 package not found")
        print(f"\nInstallation suggestions:")
        print(f"   1. Verify installation: {sys.executable} -m pip show PySide6")
        print(f"   2. Reinstall: {sys.executable} -m pip install --force-reinstall PySide6")
        return False


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    # Package name mapping: display_name -> (import_name, description)
    required_packages = {
        'PySide6': ('PySide6', 'GUI framework and locale data'),
        'numpy': ('numpy', 'Positional rendering of programmatic values'),
    }

    missing_required = []

    print(f"Python version: {sys.version}")
    print(f"Python executable: {sys.executable}\n")

    for display_name, (import_name, description) in required_packages.items():
        try:
            module = __import__(import_name)
            if import_name == 'PySide6':
                from PySide6 import QtCore, QtWidgets, QtGui
            print(f"OK {display_name}: {description} (version: {getattr(module, '__version__', 'unknown')})")
        except ImportError as e:
            missing_required.append(f"{display_name} ({description})")
            print(f"ERROR {display_name}: {description} - MISSING")
            if display_name == 'PySide6':
                print(f"   Import error: {e}")

    if missing_required:
        print(f"\nMissing required dependencies:")
        for package in missing_required:
            print(f"   - {package}")

        if any('PySide6' in pkg for pkg in missing_required):
            diagnose_pyside6()

        install_commands = [package.split()[0] for package in missing_required]
        print(f"\nTry installing with:")
        print(f"   python3 -m pip install " + " ".join(install_commands))
        return False

    return True


def setup_environment(log_dir: Optional[str] = None, debug: bool = False):
    """Prepare import path and logging."""
    current_dir = Path(__file__).parent
    if str(current_dir) not in sys.path:
        sys.path.insert(0, str(current_dir))

    from logger import setup_logger
    logger = setup_logger("numbermask", Path(log_dir) if log_dir else None)
    if debug:
        logger.set_log_level("DEBUG")
    return logger


def main(argv: Optional[List[str]] = None):
    """Main entry point for Number Mask."""
    args = None
    try:
        args = parse_arguments(argv)

        print("\n" + "="*60)
        print("Number Mask - locale-aware amount input")
        print("="*60 + "\n")

        print("Checking dependencies...")
        deps_ok = check_dependencies()

        if args.check_deps:
            if deps_ok:
                print("\nAll dependencies are satisfied!")
                return 0
            print("\nSome dependencies are missing!")
            return 1

        if not deps_ok:
            print("\nCannot start application due to missing dependencies.")
            return 1

        setup_environment(args.log_dir, args.debug)

        if args.locale:
            from config_validation import MaskConfigurationError, build_mask_config
            try:
                build_mask_config({"locale": args.locale})
            except MaskConfigurationError as e:
                print(f"\n{e}")
                return 2

        from main import main as run_main
        return run_main(args.locale)

    except KeyboardInterrupt:
        print("\n\nApplication interrupted by user")
        return 130
    except Exception as e:
        print(f"\nCritical error starting Number Mask:")
        print(f"   {type(e).__name__}: {e}")
        if args is not None and args.debug:
            print(f"\nDebug traceback:")
            traceback.print_exc()
        else:
            print(f"\nRun with --debug for detailed error information")
        return 1


if __name__ == "__main__":
    start_time = time.time()
    exit_code = main()
    runtime = time.time() - start_time
    print(f"\nNumber Mask ran for {runtime:.2f} seconds")
    sys.exit(exit_code)
