#!/usr/bin/env python

import argparse
import logging
import sys

from .analyser import SpecAnalyser
from .config import AnalyserSettings, PluginConfigSchemaV1
from .errors import SpecAnalyserError
from .helpers import ValidationErrorCollector
from .loader import load_document
from .report import ReportRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi-analyse",
        description="Lists the terraform compliant resources exposed by an OpenAPI 2.0 document.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,  # Shows default values in help
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--api-spec",
        help="Path or URL of the OpenAPI document to analyse.",
    )
    source.add_argument(
        "--config",
        help="Path to the plugin configuration file listing the services.",
    )
    parser.add_argument(
        "--service",
        help="Name of the service to analyse from the configuration file.",
    )
    parser.add_argument(
        "--output",
        help="File to write the report to. Defaults to stdout.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error if any resource had to be skipped.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log why every path was accepted or rejected.",
    )
    return parser


def main(argv=None):
    """
    Main function to parse command-line arguments and run the analysis.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    settings = AnalyserSettings()
    location = args.api_spec
    insecure_skip_verify = False
    try:
        if args.config:
            if not args.service:
                parser.error("--service is required when --config is used")
            config = PluginConfigSchemaV1.from_file(args.config)
            service = config.get_service_config(args.service)
            settings = config.analyser
            location = service.swagger_url
            insecure_skip_verify = service.insecure_skip_verify
        document = load_document(location, insecure_skip_verify)
    except SpecAnalyserError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    collector = ValidationErrorCollector()
    analyser = SpecAnalyser(document, settings, collector)
    resources = analyser.get_resources_info()
    report = ReportRenderer().render(
        resources, analyser.get_backend_configuration(), source=location
    )

    if args.output:
        with open(args.output, "w") as f:
            f.write(report)
        print(f"Report written to: {args.output}")
    else:
        print(report)

    if args.strict:
        # Prints the collected errors and exits if any resource was skipped.
        collector.report()


if __name__ == "__main__":
    main()
