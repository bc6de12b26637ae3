# -*- coding: utf-8 -*-

"""
Entry point of the `audbm` command.

Runs the click CLI in non-standalone mode so that a Ctrl-C can be told
apart from a declined confirmation prompt, and turns unexpected errors
into a logged message and exit status 1.
"""

import sys
import logging

import click

from .cli import cli
from .utils import setup_logging


EXIT_INTERRUPTED = 130  # 128 + SIGINT


def main(args=None):
    """Run the CLI and exit with its status."""
    args = sys.argv[1:] if args is None else list(args)
    verbose = '-v' in args or '--verbose' in args
    # Logging is set up again by the CLI group once options are parsed
    setup_logging(verbose=verbose, quiet='-q' in args or '--quiet' in args)

    try:
        status = cli.main(args=args, prog_name='audbm', standalone_mode=False)
    except click.ClickException as e:
        e.show()
        status = e.exit_code
    except click.Abort as e:
        if isinstance(e.__cause__, KeyboardInterrupt):
            logging.info("Interrupted by user")
            status = EXIT_INTERRUPTED
        else:
            click.echo("Aborted!", err=True)
            status = 1
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        status = EXIT_INTERRUPTED
    except Exception as e:
        if verbose:
            logging.exception("Command failed")
        else:
            logging.error(f"Command failed: {e}")
        status = 1

    sys.exit(status if isinstance(status, int) else 0)


if __name__ == '__main__':
    main()
