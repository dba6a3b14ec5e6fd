"""maui-image-versions - resolve toolchain versions for MAUI build images

    Prints one JSON document per invocation on stdout.

    Returns:
        int: Exit code
"""
import dataclasses
import json
import logging
import sys

from constants import Constants, ExitCodes, _load_yaml_config, apply_config
from common.logging_utils import configure_logging
from args import parse_args
from registry.npm.client import get_latest_version
from repository.github import GitHubClient
from versioning.dependencies import extract_platform_details
from versioning.errors import (
    InvalidVersionFormat,
    NoCompatibleImage,
    SearchServiceUnavailable,
    UnknownProductFamily,
    WorkloadSetNotFound,
)
from versioning.models import ImageFamilyTable
from versioning.resolvers.base_image import BaseImageSelector
from versioning.resolvers.workload_set import WorkloadSetResolver
from versioning.service import ToolchainResolutionService
from versioning.translate import to_tool_version
from versioning.workload_contents import WorkloadSetContentsReader

logger = logging.getLogger(__name__)


def _emit(payload):
    """Write ``payload`` as JSON to stdout."""
    if dataclasses.is_dataclass(payload):
        payload = dataclasses.asdict(payload)
    sys.stdout.write(json.dumps(payload, indent=2) + "\n")


def _selector():
    return BaseImageSelector(ImageFamilyTable.from_config(Constants.IMAGE_FAMILIES))


def cmd_workload_set(args):
    """Handle ``workload-set``."""
    candidate = WorkloadSetResolver().find_latest_workload_set(
        args.DOTNET_VERSION,
        exact_version=args.EXACT_VERSION,
        include_prerelease=args.INCLUDE_PRERELEASE,
        auto_detect_prerelease=args.AUTO_PRERELEASE,
    )
    payload = dataclasses.asdict(candidate)
    payload["tool_version"] = to_tool_version(candidate.version)
    _emit(payload)
    return ExitCodes.SUCCESS


def cmd_tool_version(args):
    """Handle ``tool-version``."""
    _emit({"package_version": args.VERSION, "tool_version": to_tool_version(args.VERSION)})
    return ExitCodes.SUCCESS


def cmd_dependencies(args):
    """Handle ``dependencies``."""
    if args.DEPENDENCIES_FILE:
        try:
            with open(args.DEPENDENCIES_FILE, encoding="utf-8-sig") as fh:
                document = json.load(fh)
        except FileNotFoundError as e:
            logger.error("File not found: %s, aborting", e)
            return ExitCodes.INVALID_INPUT
        except (IOError, json.JSONDecodeError) as e:
            logger.error("Could not read %s: %s", args.DEPENDENCIES_FILE, e)
            return ExitCodes.INVALID_INPUT
    else:
        reader = WorkloadSetContentsReader()
        candidate = WorkloadSetResolver().find_latest_workload_set(
            args.DOTNET_VERSION,
            include_prerelease=args.INCLUDE_PRERELEASE,
            auto_detect_prerelease=not args.INCLUDE_PRERELEASE,
        )
        contents = reader.read(candidate)
        ref = contents.manifest_for(args.PLATFORM) if contents else None
        if ref is None:
            logger.error("Workload set %s pins no %s manifest", candidate.version, args.PLATFORM)
            return ExitCodes.NOT_FOUND
        document = reader.fetch_dependency_document(ref)

    details = extract_platform_details(document, args.PLATFORM)
    if details is None:
        logger.error("No %s dependency details available", args.PLATFORM)
        return ExitCodes.NOT_FOUND
    _emit(details)
    return ExitCodes.SUCCESS


def cmd_base_image(args):
    """Handle ``base-image``."""
    candidate = _selector().find_best_image(
        args.IMAGE_FAMILY,
        version_range=args.VERSION_RANGE,
        recommended_version=args.RECOMMENDED_VERSION,
        include_digest=args.INCLUDE_DIGEST,
        prefer_highest=args.PREFER_HIGHEST,
    )
    payload = dataclasses.asdict(candidate)
    payload["image"] = candidate.image
    _emit(payload)
    return ExitCodes.SUCCESS


def cmd_resolve(args):
    """Handle ``resolve``."""
    service = ToolchainResolutionService(image_selector=_selector() if args.IMAGE_FAMILY else None)
    result = service.resolve(
        args.DOTNET_VERSION,
        exact_version=args.EXACT_VERSION,
        include_prerelease=args.INCLUDE_PRERELEASE,
        auto_detect_prerelease=args.AUTO_PRERELEASE,
        image_family=args.IMAGE_FAMILY,
        include_digest=args.INCLUDE_DIGEST,
        prefer_highest=args.PREFER_HIGHEST,
    )
    _emit(result.to_dict())
    if result.errors:
        for error in result.errors:
            logger.warning(error)
        if args.STRICT:
            return ExitCodes.NOT_FOUND
    return ExitCodes.SUCCESS


def cmd_npm_latest(args):
    """Handle ``npm-latest``."""
    version = get_latest_version(args.PACKAGE)
    if version is None:
        return ExitCodes.NOT_FOUND
    _emit({"package": args.PACKAGE, "version": version})
    return ExitCodes.SUCCESS


def cmd_github_release(args):
    """Handle ``github-release``."""
    owner, _, repo = args.REPOSITORY.partition("/")
    if not owner or not repo:
        logger.error("Repository must be owner/repo: %s", args.REPOSITORY)
        return ExitCodes.INVALID_INPUT
    version = GitHubClient().get_latest_release(owner, repo)
    if version is None:
        return ExitCodes.NOT_FOUND
    _emit({"repository": args.REPOSITORY, "version": version})
    return ExitCodes.SUCCESS


COMMANDS = {
    "workload-set": cmd_workload_set,
    "tool-version": cmd_tool_version,
    "dependencies": cmd_dependencies,
    "base-image": cmd_base_image,
    "resolve": cmd_resolve,
    "npm-latest": cmd_npm_latest,
    "github-release": cmd_github_release,
}


def run(argv=None):
    """Parse arguments, dispatch, and map failures to exit codes."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    apply_config(_load_yaml_config(args.CONFIG))

    try:
        code = COMMANDS[args.COMMAND](args)
    except SearchServiceUnavailable as e:
        logger.error("%s", e)
        code = ExitCodes.CONNECTION_ERROR
    except (WorkloadSetNotFound, NoCompatibleImage, UnknownProductFamily) as e:
        logger.error("%s", e)
        code = ExitCodes.NOT_FOUND
    except (InvalidVersionFormat, ValueError) as e:
        logger.error("%s", e)
        code = ExitCodes.INVALID_INPUT
    return code.value


def main():
    """Main function of the program."""
    sys.exit(run())


if __name__ == "__main__":
    main()
