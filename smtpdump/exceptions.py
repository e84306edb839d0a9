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


# Base exception for everything we raise
class SmtpdumpException(Exception):
    pass


# Base Capture exception
class SmtpdumpCaptureException(SmtpdumpException):
    pass


# * Capture exceptions...
class SmtpdumpAllocationExhausted(SmtpdumpCaptureException):
    pass


class SmtpdumpMalformedMessage(SmtpdumpCaptureException):
    pass


# Base Config exception
class SmtpdumpConfigException(SmtpdumpException):
    pass


# * Config exceptions...
class SmtpdumpConfigError(SmtpdumpConfigException):
    pass


class SmtpdumpTLSConfigError(SmtpdumpConfigException):
    pass
