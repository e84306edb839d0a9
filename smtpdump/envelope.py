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

import re
from email import errors, policy
from email.parser import BytesHeaderParser

from .exceptions import SmtpdumpMalformedMessage

# a blank line ends the header section, an empty header section starts with one
HEADER_END = re.compile(rb"\A\r?\n|\r?\n\r?\n")

# defects meaning the header section couldn't be split into headers
FATAL_DEFECTS = (
    errors.MissingHeaderBodySeparatorDefect,
    errors.FirstHeaderLineIsContinuationDefect,
)


def extract_subject(data: bytes) -> str:
    """Return the Subject header of the raw message, or an empty string if there is none.

    Raises SmtpdumpMalformedMessage if the header section is unterminated or contains lines that aren't headers.
    """
    if HEADER_END.search(data) is None:
        raise SmtpdumpMalformedMessage("header section is not terminated by a blank line")

    message = BytesHeaderParser(policy=policy.default).parsebytes(data)
    for defect in message.defects:
        if isinstance(defect, FATAL_DEFECTS):
            raise SmtpdumpMalformedMessage(f"malformed header section: {defect.__class__.__name__}")

    subject = message.get("Subject")
    if subject is None:
        return ""
    return str(subject)
