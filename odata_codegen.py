#!/usr/bin/env python3
"""
OData Codegen - digests the metadata of an OData V2/V4 service and generates
model, query object and service artifacts from it.

The artifacts are printed as a trace or as JSON for an external renderer.
"""

import argparse
import os
import sys
import traceback
from typing import Any, Dict

import requests
from dotenv import load_dotenv

from odata_codegen_lib import (
    CodegenError,
    GenerationOptions,
    MetadataParser,
    digest_metadata,
    generate_all,
    load_options,
)

# Load environment variables from .env file
load_dotenv()


def print_trace_info(data_model, result):
    """Print a summary of the digested service and all generated artifacts."""
    print("=" * 80)
    print("🔍 OData Codegen Trace Information")
    print("=" * 80)

    print(f"\n🌐 Service: {data_model.service_name}")
    print(f"📦 OData Version: V{data_model.version.value}")
    print(f"🏷️ Namespaces: {', '.join(data_model.namespaces)}")

    container = data_model.get_entity_container()
    print(f"\n📊 Data Model Summary:")
    print(f"   • Model Types: {len(data_model.model_types)}")
    print(f"   • Enum Types: {len(data_model.enum_types)}")
    print(f"   • Operations: {sum(len(ops) for ops in data_model.operation_types.values())}")
    print(f"   • Entity Sets: {len(container.entity_sets)}")
    print(f"   • Singletons: {len(container.singletons)}")
    print(f"   • Function Imports: {len(container.functions)}")
    print(f"   • Action Imports: {len(container.actions)}")
    if data_model.primitive_type_imports:
        print(f"   • Primitive Imports: {', '.join(data_model.primitive_type_imports)}")

    for title, artifacts in (("🧱 Models", result.models),
                             ("🔗 Query Objects", result.query_objects),
                             ("🛠️ Services", result.services)):
        print(f"\n{title} ({len(artifacts)} artifacts):")
        for artifact in artifacts:
            print(f"   • [{artifact.kind}] {artifact.name}")

    print("\n" + "=" * 80)


def option_overrides(args) -> Dict[str, Any]:
    """Generation options given on the command line; they win over the config file."""
    overrides = {}
    if args.service_name:
        overrides["service_name"] = args.service_name
    if args.model_prefix is not None:
        overrides["model_prefix"] = args.model_prefix
    if args.model_suffix is not None:
        overrides["model_suffix"] = args.model_suffix
    if args.big_number_as_string:
        overrides["big_number_as_string"] = True
    if args.primitive_property_services:
        overrides["enable_primitive_property_services"] = True
    if args.no_flatten_editable:
        overrides["flatten_editable_base_props"] = False
    if args.verbose:
        overrides["verbose"] = True
    return overrides


def build_options(args) -> GenerationOptions:
    options = load_options(args.config)
    overrides = option_overrides(args)
    if not overrides:
        return options
    data = options.model_dump(mode="json")
    data.update(overrides)
    return GenerationOptions.from_dict(data)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="OData metadata to typed client artifacts",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter  # Show defaults in help
    )
    parser.add_argument("--service", dest="service_via_flag", help="URL of the OData service (overrides positional argument and ODATA_URL env var)")
    parser.add_argument("service_url_pos", nargs='?', help="URL of the OData service (alternative to --service flag or env var)")
    parser.add_argument("-f", "--file", help="Read metadata from a local EDMX file instead of the service")

    parser.add_argument("-u", "--user", help="Username for basic authentication (overrides ODATA_USER env var)")
    parser.add_argument("-p", "--password", help="Password for basic authentication (overrides ODATA_PASS env var)")
    parser.add_argument("-v", "--verbose", "--debug", dest="verbose", action="store_true", help="Enable verbose output to stderr")

    parser.add_argument("-c", "--config", help="JSON file with generation options")
    parser.add_argument("--service-name", help="Name of the main service (default: namespace of the main schema)")
    parser.add_argument("--model-prefix", help="Prefix for generated model names")
    parser.add_argument("--model-suffix", help="Suffix for generated model names")
    parser.add_argument("--big-number-as-string", action="store_true", help="Represent Edm.Int64 and Edm.Decimal as strings (V4 only)")
    parser.add_argument("--primitive-property-services", action="store_true", help="Generate services for primitive and enum properties")
    parser.add_argument("--no-flatten-editable", action="store_true", help="Let editable models extend the editable base model instead of flattening base properties")

    parser.add_argument("--json", action="store_true", help="Print the generation result as JSON")
    parser.add_argument("-o", "--output", help="Write the JSON generation result to this file")
    parser.add_argument("--trace", action="store_true", help="Print a summary of the data model and all artifacts, then exit")

    args = parser.parse_args()

    # --- Configuration Handling ---
    # Priority: --file > --service flag > Positional argument > Environment Variable > .env file
    service_url = None
    if not args.file:
        service_url = args.service_via_flag or args.service_url_pos
        if service_url is None:
            service_url = os.getenv("ODATA_URL") or os.getenv("ODATA_SERVICE_URL")
            if service_url and args.verbose: print("[VERBOSE] Using ODATA_URL from environment.", file=sys.stderr)
        if not service_url:
            print("ERROR: OData metadata source not provided.", file=sys.stderr)
            print("Provide it via --file, the --service flag, as a positional argument, or ODATA_URL environment variable.", file=sys.stderr)
            parser.print_help(file=sys.stderr)
            sys.exit(1)

    auth = None
    user = args.user or os.getenv("ODATA_USER") or os.getenv("ODATA_USERNAME")
    password = args.password or os.getenv("ODATA_PASS") or os.getenv("ODATA_PASSWORD")
    if user and password:
        auth = (user, password)
        if args.verbose: print(f"[VERBOSE] Using basic authentication for user: {user}", file=sys.stderr)

    try:
        options = build_options(args)
        metadata_parser = MetadataParser(service_url, auth, verbose=args.verbose)
        metadata = metadata_parser.parse_file(args.file) if args.file else metadata_parser.fetch()
        options.check(metadata.version)

        data_model = digest_metadata(metadata, options)
        result = generate_all(data_model, options=options)

        if args.trace:
            print_trace_info(data_model, result)
            sys.exit(0)

        if args.output:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(result.to_json())
            if args.verbose: print(f"[VERBOSE] Wrote generation result to {args.output}", file=sys.stderr)
        if args.json or not args.output:
            print(result.to_json())
    except CodegenError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        if e.identifier or e.expected:
            print(f"  offending identifier: {e.identifier}, expected: {e.expected}", file=sys.stderr)
        sys.exit(1)
    except (requests.exceptions.RequestException, OSError) as e:
        print(f"ERROR: Could not read metadata: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        # Fatal error, print regardless of verbosity
        print(f"\n--- FATAL ERROR ---", file=sys.stderr)
        print(f"An unexpected error occurred during generation: {e}", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        print("-------------------", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
