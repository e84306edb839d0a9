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

import enum
from typing import IO, Optional

import click


class Direction(enum.Enum):
    READ = "read"
    WRITE = "write"


class TranscriptLogger:
    """Dump the SMTP dialogue to the console, one entry per line received or reply sent."""

    COLORS = {
        Direction.READ: "green",
        Direction.WRITE: "cyan",
    }
    INDENT = "  "

    def __init__(self, colorize: bool = True, file: Optional[IO[str]] = None) -> None:
        self.colorize = colorize  # type: bool
        self.file = file  # type: Optional[IO[str]]

    def format_line(self, direction: Direction, line: str) -> str:
        # keep multi-line data visually grouped below its first line
        line = line.rstrip("\r\n").replace("\r\n", "\n")
        text = self.INDENT + line.replace("\n", "\n" + self.INDENT)
        if self.colorize:
            text = click.style(text, fg=self.COLORS[direction])
        return text

    def log_line(self, direction: Direction, line: str) -> None:
        # click.echo drops the styling if the output doesn't support it
        click.echo(self.format_line(direction, line), file=self.file)

    def log_read(self, line: str) -> None:
        self.log_line(Direction.READ, line)

    def log_write(self, line: str) -> None:
        self.log_line(Direction.WRITE, line)
