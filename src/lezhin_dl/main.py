import sys
import argparse
from lezhin_dl.core.engine import DownloadEngine
from lezhin_dl.core.exceptions import AuthenticationError, ConfigError, CrawlError, RangeError
from lezhin_dl.utils.config import DEFAULT_CONFIG_FILE, IMAGE_FORMATS, LOCALES, DownloadConfig, load_credentials
from lezhin_dl.utils.logger import file_listener, logger

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_RANGE = 2
EXIT_AUTH = 3
EXIT_CRAWL = 4
EXIT_CONFIG = 5
EXIT_INTERRUPTED = 130

RANGE_USAGE = """Episode range examples:
  all     every episode
  8       episode 8 only
  1-10    episodes 1 to 10
  5-      episode 5 to the last
  -3      the first to episode 3"""


def build_parser():
    parser = argparse.ArgumentParser(prog="lezhin-dl", description="Lezhin Comics Downloader")
    parser.add_argument("-l", "--language", required=True, choices=list(LOCALES), help="Language of the comic page")
    parser.add_argument("-n", "--name", required=True, help="Comic name in the URL (e.g. 'snail')")
    parser.add_argument("-r", "--range", default=None, help="Episodes to download (default: all)")
    parser.add_argument("-j", "--jpg", action="store_true", help="Save images as JPEG format (default: WEBP format)")
    parser.add_argument("--format", choices=IMAGE_FORMATS, help="Image format to save as")
    parser.add_argument("-o", "--output", default=".", help="Download directory path")
    parser.add_argument("-t", "--threads", type=int, default=4, help="Number of download threads")
    parser.add_argument("--retries", type=int, default=3, help="Attempts per image")
    parser.add_argument("-c", "--config", default=DEFAULT_CONFIG_FILE, help="ini file holding [account] username/password")
    parser.add_argument("-u", "--username", help="Account username (overrides config file)")
    parser.add_argument("-p", "--password", help="Account password (overrides config file)")
    parser.add_argument("-d", "--debug", action="store_true", help="Show browser and debug logs")
    parser.add_argument("--log-file", help="Also append logs to this file")
    return parser


def build_config(args) -> DownloadConfig:
    credentials = load_credentials(args.config, args.username, args.password)
    image_format = args.format or ("jpg" if args.jpg else "webp")
    return DownloadConfig(
        language=args.language,
        comic_name=args.name,
        credentials=credentials,
        episode_range=args.range,
        image_format=image_format,
        output_dir=args.output,
        threads=args.threads,
        retries=args.retries,
        debug=args.debug,
    )


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logger.set_debug(args.debug)
    listener = file_listener(args.log_file) if args.log_file else None
    if listener:
        logger.add_listener(listener)

    engine = None
    try:
        config = build_config(args)
        engine = DownloadEngine(config)
        engine.start()
        return EXIT_OK
    except RangeError as e:
        logger.error(str(e))
        print(RANGE_USAGE, file=sys.stderr)
        return EXIT_RANGE
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG
    except AuthenticationError as e:
        logger.error(f"Authentication failed: {e}")
        return EXIT_AUTH
    except CrawlError as e:
        logger.error(f"Crawl failed: {e}")
        return EXIT_CRAWL
    except KeyboardInterrupt:
        logger.warning("Stopped by user.")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception(f"Critical Error: {e}")
        return EXIT_ERROR
    finally:
        if engine is not None:
            engine.stop()
        if listener:
            logger.remove_listener(listener)


def main():
    sys.exit(run())

if __name__ == "__main__":
    main()
