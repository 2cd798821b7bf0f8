#!/usr/bin/env python3
"""
CCBI Inspector - Command Line Version
Decodes CocosBuilder .ccbi files and prints their node tree, timelines and bindings
"""

import argparse
import sys
from pathlib import Path

from ccbi_loader import CCBILoader
from core.constants import DEFAULT_CONTAINER_SIZE

# Supported file extensions
VALID_EXTENSIONS = {'.ccbi'}


def format_tree(node, max_depth=None, depth=0):
    """Render a node and its descendants as indented lines

    Args:
        node: Root of the (sub)tree
        max_depth: Deepest level to print (None = unlimited)
        depth: Level of node

    Returns:
        list: One line per printed node
    """
    indent = '  ' * depth
    class_name = getattr(node, 'class_name', type(node).__name__)
    x, y = getattr(node, 'position', (0.0, 0.0))
    lines = [f"{indent}{class_name}  pos=({x:g}, {y:g}) tag={getattr(node, 'tag', -1)}"]

    custom = getattr(node, 'custom_properties', None)
    if custom:
        lines.append(f"{indent}  custom: {custom}")

    children = getattr(node, 'children', [])
    if max_depth is not None and depth >= max_depth:
        if children:
            lines.append(f"{indent}  ... {len(children)} child node(s)")
        return lines

    for child in children:
        lines.extend(format_tree(child, max_depth, depth + 1))
    return lines


def format_sequences(manager):
    """Render the sequences of an animation manager"""
    lines = []
    for seq in manager.sequences:
        marker = '*' if seq.sequence_id == manager.auto_play_sequence_id else ' '
        line = f"{marker} [{seq.sequence_id}] {seq.name}  {seq.duration:g}s"
        if seq.chained_sequence_id >= 0:
            line += f"  -> [{seq.chained_sequence_id}]"
        lines.append(line)
        if seq.callback_channel:
            for kf in seq.callback_channel.keyframes:
                name, callback_type = kf.value
                lines.append(f"      {kf.time:g}s callback {name} (type {callback_type})")
        if seq.sound_channel:
            for kf in seq.sound_channel.keyframes:
                lines.append(f"      {kf.time:g}s sound {kf.value[0]}")

    for node in manager.animated_nodes:
        sequences = manager.get_sequences_for_node(node)
        for seq_id, props in sequences.items():
            for name, prop in props.items():
                lines.append(
                    f"  {getattr(node, 'class_name', type(node).__name__)} [{seq_id}] "
                    f"{name}: {len(prop.keyframes)} keyframe(s)"
                )
    return lines


def format_bindings(reader):
    """Render the outlet and callback names recorded by a decode"""
    lines = []
    for name in reader.owner_outlet_names:
        lines.append(f"  owner outlet    {name}")
    for name in reader.owner_callback_names:
        lines.append(f"  owner callback  {name}")

    for manager in reader.animation_managers_for_nodes or []:
        if manager.document_controller_name:
            lines.append(f"  controller      {manager.document_controller_name}")
        for name in manager.document_outlet_names:
            lines.append(f"  doc outlet      {name}")
        for name in manager.document_callback_names:
            lines.append(f"  doc callback    {name}")
    return lines


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='ccbi-inspect',
        description='Decode CocosBuilder .ccbi files and print their contents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the node tree
  python ccbi_inspect.py MainScene.ccbi

  # Resolve resources and sub-files relative to a folder
  python ccbi_inspect.py ccb/MainScene.ccbi --root-path ccb/

  # Show timelines, limit tree depth, lay out in a 1024x768 container
  python ccbi_inspect.py MainScene.ccbi --sequences --max-depth 2 --width 1024 --height 768
        """
    )

    parser.add_argument('inputs', type=str, nargs='+', help='Input .ccbi file(s)')
    parser.add_argument('--root-path', type=str, default='',
                       help='Prefix for resources and embedded .ccbi files (default: none)')
    parser.add_argument('--width', type=float, default=DEFAULT_CONTAINER_SIZE[0],
                       help=f'Container width (default: {DEFAULT_CONTAINER_SIZE[0]:g})')
    parser.add_argument('--height', type=float, default=DEFAULT_CONTAINER_SIZE[1],
                       help=f'Container height (default: {DEFAULT_CONTAINER_SIZE[1]:g})')
    parser.add_argument('--max-depth', type=int,
                       help='Deepest tree level to print (default: unlimited)')
    parser.add_argument('--sequences', action='store_true',
                       help='Also print sequences and animated properties')

    args = parser.parse_args(argv)

    loader = CCBILoader(root_path=args.root_path)
    failed = False

    for input_file in args.inputs:
        input_path = Path(input_file)
        if not input_path.exists():
            print(f"Error: Input file not found: {input_file}", file=sys.stderr)
            failed = True
            continue

        file_ext = input_path.suffix.lower()
        if file_ext not in VALID_EXTENSIONS:
            print(f"Error: Unsupported file format: {file_ext}", file=sys.stderr)
            print(f"Supported formats: {', '.join(sorted(VALID_EXTENSIONS))}", file=sys.stderr)
            failed = True
            continue

        print("=" * 60)
        print(f"File: {input_path.name}")
        print("=" * 60)

        node = loader.load(str(input_path), parent_size=(args.width, args.height))
        if node is None:
            print(f"\n✗ Decoding failed: {loader.last_error}", file=sys.stderr)
            failed = True
            continue

        reader = loader.last_reader
        manager = reader.animation_manager
        print(f"Document controlled: {'yes' if reader.is_document_controlled else 'no'}")
        print(f"Strings: {len(reader.string_cache)}")
        print(f"Sequences: {len(manager.sequences)} (auto-play: {manager.auto_play_sequence_id})")

        print("\nNodes:")
        for line in format_tree(node, args.max_depth):
            print(f"  {line}")

        if args.sequences:
            print("\nSequences:")
            for line in format_sequences(manager) or ['  (none)']:
                print(line)

        bindings = format_bindings(reader)
        if bindings:
            print("\nBindings:")
            for line in bindings:
                print(line)
        print()

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
