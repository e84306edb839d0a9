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

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Tuple

from loguru import logger

from .envelope import extract_subject
from .exceptions import SmtpdumpMalformedMessage

# Peer address as reported by the SMTP server, usually a (host, port) tuple.
Origin = Any


class CredentialPolicy(ABC):
    @abstractmethod
    def on_auth(
        self, origin: Origin, mechanism: str, username: bytes, password: bytes, shared_secret: bytes
    ) -> Tuple[bool, Optional[Exception]]:
        """Decide whether the offered credentials are accepted.

        Returns a tuple (accepted, error)."""


class RecipientPolicy(ABC):
    @abstractmethod
    def on_rcpt(self, origin: Origin, sender: str, recipient: str) -> bool:
        """Return True if mail for recipient is accepted."""


class DispositionPolicy(ABC):
    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose  # type: bool

    @abstractmethod
    def on_message(self, origin: Origin, sender: str, recipients: List[str], data: bytes) -> None:
        """Handle a completed mail transaction.

        This must not raise for problems with a single message. Failures are logged and the transaction is dropped,
        the client is never told about it."""

    def log_received(self, sender: str, data: bytes) -> None:
        try:
            subject = extract_subject(data)
        except SmtpdumpMalformedMessage as err:
            logger.warning(f"couldn't parse mail from {sender!r}: {err}")
            return

        logger.info(f"received mail from {sender!r} with subject {subject!r}")
