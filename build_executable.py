#!/usr/bin/env python3
"""
Build script for creating a standalone ccbi-inspect executable using PyInstaller
Run this after installing the build extra: pip install -e .[build]
"""

import PyInstaller.__main__
import sys


def build():
    """Build standalone executable"""

    # Determine platform
    if sys.platform.startswith('win'):
        exe_name = 'ccbi-inspect.exe'
    else:
        exe_name = 'ccbi-inspect'

    print("=" * 50)
    print("Building Standalone Executable")
    print("=" * 50)
    print(f"Platform: {sys.platform}")
    print(f"Output: {exe_name}")
    print("=" * 50)

    # PyInstaller arguments
    args = [
        'ccbi_inspect.py',
        '--name=' + exe_name,
        '--onefile',  # Single executable file
        '--console',
        '--clean',
        '--noconfirm',
        '--hidden-import=ccbi_loader',
        # Readers module
        '--hidden-import=readers',
        '--hidden-import=readers.bit_cursor',
        '--hidden-import=readers.string_cache',
        '--hidden-import=readers.ccbi_reader',
        # Loaders module
        '--hidden-import=loaders',
        '--hidden-import=loaders.base_loader',
        '--hidden-import=loaders.node_loader',
        '--hidden-import=loaders.ccb_file_loader',
        # Core module
        '--hidden-import=core.constants',
        '--hidden-import=core.errors',
        '--hidden-import=core.scene_node',
        '--hidden-import=core.sprite_frames',
        '--hidden-import=core.timeline',
        '--hidden-import=numpy',
    ]

    # Run PyInstaller
    try:
        PyInstaller.__main__.run(args)

        print("\n" + "=" * 50)
        print("Build Complete!")
        print("=" * 50)

        if sys.platform.startswith('win'):
            print(f"\nExecutable location: dist\\{exe_name}")
        else:
            print(f"\nExecutable location: dist/{exe_name}")

    except Exception as e:
        print(f"\nBuild failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    build()
