"""
This file is part of smtpdump (https://github.com/spezifisch/smtpdump).
Copyright (c) 2022 spezifisch (https://github.com/spezifisch)

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, version 3 of the License.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""

import asyncio
import os
import socket
import sys
import tempfile
from typing import Any, Dict

import click
import strictyaml
from click.core import ParameterSource
from loguru import logger

import smtpdump.smtpdump_server

from .config_schema import MIN_VERSION_OPTIONS, OPTION_NAMES, SmtpdumpSchema
from .exceptions import SmtpdumpConfigError, SmtpdumpConfigException
from .policies import AcceptAllCredentials, AcceptAllRecipients, DiscardDisposition, PersistDisposition
from .policy_base import DispositionPolicy
from .smtpdump_server import CaptureAuthenticator, CaptureHandler, parse_listen_address
from .tls_policy import build_tls_context
from .transcript import TranscriptLogger


def load_config(path: str) -> Dict[str, Any]:
    """Load a YAML config file and return its values keyed by command line option name.

    Raises OSError if the file can't be read and strictyaml.YAMLError if it doesn't match the schema."""
    with open(path, "r") as f:
        document = strictyaml.load(f.read(), schema=SmtpdumpSchema, label=path)

    options = {}  # type: Dict[str, Any]
    for (section, key), option in OPTION_NAMES.items():
        if key in document.data.get(section, {}):
            options[option] = document.data[section][key]

    min_version = document.data.get("tls", {}).get("min_version")
    if min_version is not None:
        options[MIN_VERSION_OPTIONS[min_version]] = True

    return options


def resolve_output_dir(output: str) -> str:
    if not output:
        output = tempfile.gettempdir()
    if not os.path.isdir(output):
        raise SmtpdumpConfigError(f"output directory {output!r} doesn't exist")
    return os.path.abspath(output)


@click.command()
@click.option("--config", default=None, help="Config file (command line options take precedence)")
@click.option("--addr", default="127.0.0.1:2525", help="Listen address:port")
@click.option("--hostname", default=socket.gethostname, help="Server host name")
@click.option("--output", default=".", help="Output directory (empty for the temporary directory)")
@click.option("--extension", default=PersistDisposition.DEFAULT_EXTENSION, help="Saved file extension")
@click.option("--discard", default=False, is_flag=True, help="Discard incoming messages")
@click.option("--cert", default="", help="PEM-encoded certificate")
@click.option("--key", default="", help="PEM-encoded private key")
@click.option("--tls11", default=False, is_flag=True, help="Accept TLSv1.1 as a minimum")
@click.option("--tls12", default=False, is_flag=True, help="Accept TLSv1.2 as a minimum")
@click.option("--tls13", default=False, is_flag=True, help="Accept TLSv1.3 as a minimum")
@click.option("--color/--no-color", default=True, help="Colorize protocol transcript")
@click.option("--verbose", default=False, is_flag=True, help="Log subjects and written files")
@click.option("--debug", default=False, is_flag=True, help="Print protocol transcript and set loglevel to DEBUG")
@click.option("--trace", default=False, is_flag=True, help="Set loglevel to TRACE")
def run(
    config: str,
    addr: str,
    hostname: str,
    output: str,
    extension: str,
    discard: bool,
    cert: str,
    key: str,
    tls11: bool,
    tls12: bool,
    tls13: bool,
    color: bool,
    verbose: bool,
    debug: bool,
    trace: bool,
) -> None:
    logger.remove()
    if trace:
        # print pretty much every call
        logger.add(sys.stderr, level="TRACE")
    elif debug:
        logger.add(sys.stderr, level="DEBUG")
    else:
        # don't print full backtraces which may include mail content
        logger.add(sys.stderr, level="INFO", diagnose=False, backtrace=False)

    options = {
        "addr": addr,
        "hostname": hostname,
        "output": output,
        "extension": extension,
        "discard": discard,
        "cert": cert,
        "key": key,
        "tls11": tls11,
        "tls12": tls12,
        "tls13": tls13,
    }  # type: Dict[str, Any]

    # load config file, its values only replace defaults
    if config:
        try:
            file_options = load_config(config)
        except OSError as err:
            logger.error(f"couldn't load config file: {err}")
            sys.exit(1)
        except strictyaml.YAMLError as err:
            logger.error(f"config file parsing error:\n{err}")
            sys.exit(1)

        ctx = click.get_current_context()
        tls_flags = MIN_VERSION_OPTIONS.values()
        tls_flags_given = any(ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE for name in tls_flags)
        for name, value in file_options.items():
            if ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE:
                continue
            if name in tls_flags and tls_flags_given:
                continue
            options[name] = value

    # validate
    try:
        if not options["hostname"]:
            raise SmtpdumpConfigError("Hostname cannot be empty")
        host, port = parse_listen_address(options["addr"])
        output_dir = resolve_output_dir(options["output"])
        tls_context = build_tls_context(
            options["cert"], options["key"], tls11=options["tls11"], tls12=options["tls12"], tls13=options["tls13"]
        )
    except SmtpdumpConfigException as err:
        logger.error(f"{err}")
        sys.exit(1)

    # policies
    if options["discard"]:
        disposition = DiscardDisposition(verbose=verbose)  # type: DispositionPolicy
    else:
        disposition = PersistDisposition(output_dir, extension=options["extension"], verbose=verbose)
    handler = CaptureHandler(AcceptAllRecipients(), disposition)
    authenticator = CaptureAuthenticator(AcceptAllCredentials())
    transcript = TranscriptLogger(colorize=color) if debug else None

    # serve until interrupted
    try:
        asyncio.run(
            smtpdump.smtpdump_server.serve(
                handler,
                authenticator,
                host,
                port,
                options["hostname"],
                tls_context=tls_context,
                transcript=transcript,
            )
        )
    except KeyboardInterrupt:
        logger.info("shutting down")
    except OSError as err:
        logger.error(f"server error: {err}")
        sys.exit(1)


if __name__ == "__main__":
    run()
