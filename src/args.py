"""Argument parsing functionality for maui-image-versions."""

import argparse

from constants import Platforms


def _add_workload_options(parser):
    parser.add_argument("-n", "--dotnet",
                        dest="DOTNET_VERSION",
                        help=".NET channel, i.e: 9.0, 10.0",
                        action="store", type=str,
                        required=True)
    parser.add_argument("-w", "--workload-set-version",
                        dest="EXACT_VERSION",
                        help="Exact workload set version (package 9.203.0 or CLI 9.0.203 form)",
                        action="store", type=str)
    parser.add_argument("--prerelease",
                        dest="INCLUDE_PRERELEASE",
                        help="Include prerelease workload sets.",
                        action="store_true")


def _add_image_options(parser, family_required):
    parser.add_argument("--family",
                        dest="IMAGE_FAMILY",
                        help="Base image family, i.e: tahoe, sequoia",
                        action="store", type=str.lower,
                        required=family_required)
    parser.add_argument("--digest",
                        dest="INCLUDE_DIGEST",
                        help="Resolve the content digest of the selected image.",
                        action="store_true")
    parser.add_argument("--highest",
                        dest="PREFER_HIGHEST",
                        help="Select the highest compatible tag instead of the recommended one.",
                        action="store_true")


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="maui-image-versions",
        description=(
            "Resolve workload sets, toolchain requirements and base images "
            "for .NET MAUI build images"
        ),
        add_help=True,
    )
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to YAML configuration file",
                        action="store",
                        type=str)

    sub = parser.add_subparsers(dest="COMMAND", metavar="command")
    sub.required = True

    ws = sub.add_parser("workload-set", help="Find the latest (or an exact) workload set")
    _add_workload_options(ws)
    ws.add_argument("--auto-prerelease",
                    dest="AUTO_PRERELEASE",
                    help="Use prereleases only when no stable workload set exists.",
                    action="store_true")

    tv = sub.add_parser("tool-version", help="Convert a workload set package version to CLI form")
    tv.add_argument("VERSION", help="Package version, i.e: 9.203.0")

    deps = sub.add_parser("dependencies", help="Extract toolchain requirements for one platform")
    deps.add_argument("-p", "--platform",
                      dest="PLATFORM",
                      help="Target platform",
                      action="store", type=str.lower,
                      choices=[p.value for p in Platforms],
                      required=True)
    source = deps.add_mutually_exclusive_group(required=True)
    source.add_argument("-f", "--file",
                        dest="DEPENDENCIES_FILE",
                        help="Local WorkloadDependencies.json",
                        action="store", type=str)
    source.add_argument("-n", "--dotnet",
                        dest="DOTNET_VERSION",
                        help=".NET channel whose latest workload set is inspected",
                        action="store", type=str)
    deps.add_argument("--prerelease",
                      dest="INCLUDE_PRERELEASE",
                      help="Include prerelease workload sets.",
                      action="store_true")

    img = sub.add_parser("base-image", help="Select a base VM image")
    _add_image_options(img, family_required=True)
    img.add_argument("-r", "--range",
                     dest="VERSION_RANGE",
                     help="Interval such as [16.0,17.0)",
                     action="store", type=str)
    img.add_argument("--recommended",
                     dest="RECOMMENDED_VERSION",
                     help="Preferred Xcode version",
                     action="store", type=str)

    res = sub.add_parser("resolve", help="Resolve everything for one .NET channel")
    _add_workload_options(res)
    res.add_argument("--no-auto-prerelease",
                     dest="AUTO_PRERELEASE",
                     help="Do not fall back to prereleases when no stable workload set exists.",
                     action="store_false")
    _add_image_options(res, family_required=False)
    res.add_argument("--strict",
                     dest="STRICT",
                     help="Exit non-zero if any leg failed.",
                     action="store_true")

    npm = sub.add_parser("npm-latest", help="Latest version of an npm package")
    npm.add_argument("PACKAGE", help="Package name, i.e: appium")

    gh = sub.add_parser("github-release", help="Latest release of a GitHub repository")
    gh.add_argument("REPOSITORY", help="owner/repo, i.e: actions/runner")

    return parser.parse_args(argv)
