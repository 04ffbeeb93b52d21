import logging
import pprint
import sys

from tnetcodec import DecodeError, DecoderConfig, decode, from_value


if __name__ == "__main__":

    import argparse

    parser = argparse.ArgumentParser(description="TNetString Inspect Example")
    parser.add_argument(
        "data",
        metavar="<data>",
        type=str,
        nargs="?",
        help="A TNetString to decode. Read from stdin if not supplied.",
    )
    parser.add_argument(
        "--max-depth",
        metavar="<depth>",
        type=int,
        default=DecoderConfig().max_depth,
        help="The maximum nesting depth to accept",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Show the value tree instead of plain Python objects",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "error"],
        default="error",
        help="Logging level. Default is 'error'.",
    )

    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s.%(msecs)03.0f [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=getattr(logging, args.log_level.upper()),
    )

    data = args.data.encode() if args.data else sys.stdin.buffer.read()

    try:
        value = decode(data, DecoderConfig(max_depth=args.max_depth))
    except DecodeError as exc:
        print(f"invalid TNetString: {exc}")
        sys.exit(1)

    pprint.pprint(value if args.raw else from_value(value, encoding=None))
