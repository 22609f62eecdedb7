import io
import platform
import sys

from checkhttp.core.errors import ConfigError
from checkhttp.core.models import Verdict
from checkhttp.core.runner import check
from checkhttp.parsers.options import build_parser, resolve
from checkhttp.reporters.console import Log

VERSION = "0.1.0"


def version_string() -> str:
    return f"{VERSION} Python: {platform.python_implementation()} {platform.python_version()}"


def run(argv: list[str], output) -> int:
    """Run the probe for ``argv``, write one summary line, return the exit code."""
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.help:
            print(parser.format_help(), file=output)
            return int(Verdict.UNKNOWN)
        if args.version:
            print(version_string(), file=output)
            return int(Verdict.OK)
        config = resolve(args)
    except ConfigError as exc:
        print(exc, file=output)
        return int(Verdict.UNKNOWN)

    result = check(config, logger=Log(verbose=config.verbose))
    print(result.message, file=output)
    return int(result.verdict)


def main():
    output = io.StringIO()
    rc = run(sys.argv[1:], output)
    print(output.getvalue().strip())
    sys.exit(rc)


if __name__ == "__main__":
    main()
