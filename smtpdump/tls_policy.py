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

import ssl
from typing import Optional

from loguru import logger

from .exceptions import SmtpdumpTLSConfigError


def select_minimum_version(tls11: bool = False, tls12: bool = False, tls13: bool = False) -> Optional[ssl.TLSVersion]:
    """Return the TLS version floor requested by the flags, the highest one wins.

    Returns None if no flag is set, leaving the ssl module default in place."""
    if tls13:
        return ssl.TLSVersion.TLSv1_3
    if tls12:
        return ssl.TLSVersion.TLSv1_2
    if tls11:
        return ssl.TLSVersion.TLSv1_1
    return None


def build_tls_context(
    cert: str, key: str, tls11: bool = False, tls12: bool = False, tls13: bool = False
) -> Optional[ssl.SSLContext]:
    """Build the server side TLS context from PEM encoded certificate and key files.

    Returns None if TLS shouldn't be offered, i.e. if certificate or key is missing.
    Raises SmtpdumpTLSConfigError if the files can't be read or don't form a valid certificate/key pair.
    """
    if not cert and not key:
        logger.debug("no certificate and key given, TLS disabled")
        return None
    if not cert or not key:
        logger.warning("TLS needs both certificate and key, TLS disabled")
        return None

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    try:
        context.load_cert_chain(certfile=cert, keyfile=key)
    except ssl.SSLError as err:
        raise SmtpdumpTLSConfigError(f"invalid certificate or key: {err}")
    except OSError as err:
        raise SmtpdumpTLSConfigError(f"couldn't load certificate or key: {err}")
    logger.info("Enabled TLS support")

    minimum_version = select_minimum_version(tls11=tls11, tls12=tls12, tls13=tls13)
    if minimum_version is not None:
        context.minimum_version = minimum_version
        logger.info(f"Minimum {minimum_version.name} accepted")

    return context
