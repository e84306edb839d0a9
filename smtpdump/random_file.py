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

import os
import time
from typing import BinaryIO, Tuple

from loguru import logger

from .exceptions import SmtpdumpAllocationExhausted

# Make a reasonable number of attempts to find a unique file name.
MAX_ATTEMPTS = 10000

# Quick and dirty congruential generator from Numerical Recipes.
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32


def lcg_random() -> int:
    """Return a pseudo-random number seeded from the current time and our pid.

    This is only meant to avoid file name collisions. It is predictable and must not be used for anything security
    related.
    """
    seed = time.time_ns() + os.getpid()
    return (seed * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS


def random_file(directory: str, prefix: str, suffix: str) -> Tuple[str, BinaryIO]:
    """Create a new file named `<prefix>_<random>.<suffix>` in directory and return its path and file object.

    The file is created with O_EXCL so an existing file is never reused, even if another thread or process picks the
    same name at the same time. On a collision we draw a new number and try again. Any other OSError is raised to the
    caller. Raises SmtpdumpAllocationExhausted if no unique name was found after MAX_ATTEMPTS tries.

    The caller is responsible for closing the returned file object.
    """
    for attempt in range(MAX_ATTEMPTS):
        name = os.path.join(directory, f"{prefix}_{lcg_random()}.{suffix}")
        try:
            fd = os.open(name, os.O_RDWR | os.O_CREAT | os.O_EXCL, 0o600)
        except FileExistsError:
            logger.trace(f"name collision on attempt {attempt}: {name}")
            continue

        try:
            fp = os.fdopen(fd, "w+b")
        except BaseException:
            os.close(fd)
            os.unlink(name)
            raise

        return name, fp

    raise SmtpdumpAllocationExhausted(f"no unique file name found in {directory!r} after {MAX_ATTEMPTS} attempts")
