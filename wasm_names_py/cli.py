#!/usr/bin/env python3
"""
wasm-names

Command-line interface for decoding and re-encoding the "name" custom
section of WebAssembly modules.

Usage:
    wasm-names <input> [--raw] [--output FILE] [--config FILE] [--no-strict]
    wasm-names -h | --help
    wasm-names --version

Arguments:
    input              A .wasm module, or with --raw a bare name section payload

Options:
    --raw              Treat the input as a name section payload
    -o --output FILE   Write the re-encoded module (or payload with --raw)
    --config FILE      Path to config.json
    --no-strict        Do not cross-check declared subsection lengths
    -h --help          Show this help message
    --version          Show version
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional, Tuple

from . import __version__
from .config import Config
from .errors import FormatError
from .formats.wasm import WasmModule
from .names import NameSection, read_name_sections, write_name_sections


def describe_section(section: NameSection) -> str:
    """One-line summary of a subsection."""
    if section.module_name is not None:
        return f"[{section.name_type}] module: {section.module_name.name!r}"
    if section.function_names is not None:
        return f"[{section.name_type}] function: {len(section.function_names.names)} names"
    if section.local_names is not None:
        local_names = section.local_names.local_names
        total = sum(len(names) for names in local_names.values())
        return f"[{section.name_type}] local: {total} names in {len(local_names)} functions"
    return f"[{section.name_type}] unparsed: {len(section.payload)} bytes"


def load_payload(data: bytes, raw: bool, config: Config) -> Tuple[Optional[WasmModule], Optional[bytes]]:
    """
    Get the name section payload from the input.

    Args:
        data: Input file contents
        raw: Whether the input is already a name section payload
        config: Configuration

    Returns:
        Tuple of (module or None, payload or None if the module has no name section)
    """
    if raw:
        return None, data

    module = WasmModule(data)
    print(f"Detected WebAssembly module with {len(module.sections)} sections")
    return module, module.find_custom_section(config.section_name)


def process(data: bytes, raw: bool, config: Config) -> Tuple[List[NameSection], bytes, Optional[bytes]]:
    """
    Decode, summarize and re-encode a name section.

    Returns:
        Tuple of (subsections, re-encoded payload, rebuilt module bytes or None)

    Raises:
        FormatError: If the input is malformed or does not round-trip
    """
    module, payload = load_payload(data, raw, config)
    if payload is None:
        raise FormatError(f"No '{config.section_name}' custom section found")

    sections = read_name_sections(
        payload,
        strict=config.strict_payload_length,
        max_payload_len=config.max_payload_len
    )
    for section in sections:
        print(describe_section(section))

    encoded = write_name_sections(sections)
    if config.verify_round_trip:
        if encoded != payload:
            raise FormatError("Re-encoded name section differs from the input")
        print("Round trip OK")

    rebuilt = module.replace_custom_section(config.section_name, encoded) if module else None
    return sections, encoded, rebuilt


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="wasm-names - Decode and re-encode WebAssembly name sections",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('input', help='WebAssembly module or name section payload')
    parser.add_argument('--raw', action='store_true', help='Input is a bare name section payload')
    parser.add_argument('-o', '--output', type=str, help='Write the re-encoded output here')
    parser.add_argument('--config', type=str, help='Path to config.json')
    parser.add_argument('--no-strict', action='store_true', help='Do not cross-check subsection lengths')
    parser.add_argument('--version', action='version', version=f'wasm-names {__version__}')

    args = parser.parse_args(argv)

    # Load config
    config_path = Path(args.config) if args.config else None
    config = Config.load(config_path)
    if args.no_strict:
        config.strict_payload_length = False

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"ERROR: Input file not found: {input_path}")
        sys.exit(1)

    try:
        _, encoded, rebuilt = process(input_path.read_bytes(), args.raw, config)
    except FormatError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    if args.output:
        Path(args.output).write_bytes(encoded if rebuilt is None else rebuilt)
        print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
