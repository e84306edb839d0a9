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

import time
from typing import List, Optional, Tuple

from loguru import logger

from .exceptions import SmtpdumpAllocationExhausted
from .policy_base import CredentialPolicy, DispositionPolicy, Origin, RecipientPolicy
from .random_file import random_file


class AcceptAllCredentials(CredentialPolicy):
    """Log credentials and accept them, whatever they are."""

    def on_auth(
        self, origin: Origin, mechanism: str, username: bytes, password: bytes, shared_secret: bytes
    ) -> Tuple[bool, Optional[Exception]]:
        logger.info(f"[AUTH] User: {username!r}; Password: {password!r}")
        logger.trace(f"auth mechanism {mechanism} from {origin}")
        return True, None


class AcceptAllRecipients(RecipientPolicy):
    def on_rcpt(self, origin: Origin, sender: str, recipient: str) -> bool:
        logger.info(f"[RCPT] {sender!r} => {recipient!r}")
        return True


class DiscardDisposition(DispositionPolicy):
    """Log incoming mails (if verbose) and throw them away."""

    def on_message(self, origin: Origin, sender: str, recipients: List[str], data: bytes) -> None:
        if self.verbose:
            self.log_received(sender, data)


class PersistDisposition(DispositionPolicy):
    """Write every incoming mail unmodified to a new file in the output directory."""

    DEFAULT_EXTENSION = "eml"

    def __init__(self, output_dir: str, extension: str = DEFAULT_EXTENSION, verbose: bool = False) -> None:
        super().__init__(verbose=verbose)
        self.output_dir = output_dir  # type: str
        self.extension = extension  # type: str

    def on_message(self, origin: Origin, sender: str, recipients: List[str], data: bytes) -> None:
        if self.verbose:
            self.log_received(sender, data)

        try:
            path, fp = random_file(self.output_dir, str(time.time_ns()), self.extension)
        except (SmtpdumpAllocationExhausted, OSError) as err:
            logger.error(f"couldn't create output file for mail from {sender!r}: {err}")
            return

        with fp:
            try:
                fp.write(data)
            except OSError as err:
                logger.error(f"failed writing {path!r}: {err}")
                return

        if self.verbose:
            logger.info(f"wrote {path!r}")
