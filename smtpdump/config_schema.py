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

from strictyaml import Bool, Enum, Map, Optional, Str

_server_schema = Map(
    {
        Optional("addr"): Str(),
        Optional("hostname"): Str(),
    }
)

_output_schema = Map(
    {
        Optional("directory"): Str(),
        Optional("extension"): Str(),
        Optional("discard"): Bool(),
    }
)

_tls_schema = Map(
    {
        Optional("cert"): Str(),
        Optional("key"): Str(),
        Optional("min_version"): Enum(["1.1", "1.2", "1.3"]),
    }
)

SmtpdumpSchema = Map(
    {
        Optional("server"): _server_schema,
        Optional("output"): _output_schema,
        Optional("tls"): _tls_schema,
    }
)

# config file keys and the command line options they provide defaults for
OPTION_NAMES = {
    ("server", "addr"): "addr",
    ("server", "hostname"): "hostname",
    ("output", "directory"): "output",
    ("output", "extension"): "extension",
    ("output", "discard"): "discard",
    ("tls", "cert"): "cert",
    ("tls", "key"): "key",
}

MIN_VERSION_OPTIONS = {
    "1.1": "tls11",
    "1.2": "tls12",
    "1.3": "tls13",
}
