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
import functools
import ssl
from typing import Any, AnyStr, Optional, Tuple

from aiosmtpd.smtp import SMTP, AuthResult, Envelope, LoginPassword, Session
from loguru import logger

from .exceptions import SmtpdumpConfigError
from .policy_base import CredentialPolicy, DispositionPolicy, RecipientPolicy
from .transcript import TranscriptLogger

IDENT = "SMTPDump"


class CaptureHandler:
    """aiosmtpd handler passing recipients and completed mails to our policies."""

    def __init__(self, recipient_policy: RecipientPolicy, disposition_policy: DispositionPolicy) -> None:
        self.recipient_policy = recipient_policy  # type: RecipientPolicy
        self.disposition_policy = disposition_policy  # type: DispositionPolicy

    async def handle_RCPT(
        self, server: SMTP, session: Session, envelope: Envelope, address: str, rcpt_options: Any
    ) -> str:
        if not self.recipient_policy.on_rcpt(session.peer, envelope.mail_from, address):
            return "550 Recipient rejected"

        envelope.rcpt_tos.append(address)
        return "250 OK"

    async def handle_DATA(self, server: SMTP, session: Session, envelope: Envelope) -> str:
        logger.trace(f"DATA from {session.peer}: {len(envelope.content)} bytes")

        # dispositions do blocking file I/O, keep them off the event loop
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None,
            self.disposition_policy.on_message,
            session.peer,
            envelope.mail_from,
            list(envelope.rcpt_tos),
            bytes(envelope.content),
        )

        # failures are only visible in our log, the client always gets an OK
        return "250 Message accepted for delivery"


class CaptureAuthenticator:
    """aiosmtpd authenticator asking our credential policy."""

    def __init__(self, credential_policy: CredentialPolicy) -> None:
        self.credential_policy = credential_policy  # type: CredentialPolicy

    def __call__(self, server: SMTP, session: Session, envelope: Envelope, mechanism: str, auth_data: Any) -> AuthResult:
        username, password = b"", b""
        if isinstance(auth_data, LoginPassword):
            username, password = auth_data.login, auth_data.password

        accepted, err = self.credential_policy.on_auth(session.peer, mechanism, username, password, b"")
        if err is not None:
            logger.warning(f"authentication error: {err}")
        return AuthResult(success=accepted, auth_data=username)


class TranscriptSMTP(SMTP):
    """SMTP protocol that hands everything read and written to a TranscriptLogger."""

    def __init__(self, handler: Any, *, transcript: Optional[TranscriptLogger] = None, **kwargs: Any) -> None:
        super().__init__(handler, **kwargs)
        self.transcript = transcript  # type: Optional[TranscriptLogger]
        # received bytes not yet terminated by a newline
        self.transcript_buffer = bytearray()

    def data_received(self, data: bytes) -> None:
        if self.transcript is not None:
            self.transcript_buffer.extend(data)
            while True:
                end = self.transcript_buffer.find(b"\n")
                if end < 0:
                    break
                line = bytes(self.transcript_buffer[: end + 1])
                del self.transcript_buffer[: end + 1]
                self.transcript.log_read(line.decode("utf-8", errors="replace"))
        super().data_received(data)

    def connection_lost(self, error: Optional[Exception]) -> None:
        if self.transcript is not None and self.transcript_buffer:
            self.transcript.log_read(self.transcript_buffer.decode("utf-8", errors="replace"))
            self.transcript_buffer.clear()
        super().connection_lost(error)

    async def push(self, status: AnyStr) -> None:
        if self.transcript is not None:
            line = status if isinstance(status, str) else status.decode("utf-8", errors="replace")
            self.transcript.log_write(line)
        await super().push(status)


def parse_listen_address(addr: str) -> Tuple[str, int]:
    """Split "host:port" (or "[v6host]:port") into host and port.

    Raises SmtpdumpConfigError if addr isn't a valid listen address."""
    host, sep, port_str = addr.rpartition(":")
    if not sep:
        raise SmtpdumpConfigError(f"listen address {addr!r} is missing a port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise SmtpdumpConfigError(f"invalid port in listen address {addr!r}")
    if not 0 <= port <= 65535:
        raise SmtpdumpConfigError(f"port out of range in listen address {addr!r}")

    return host, port


async def create_server(
    handler: CaptureHandler,
    authenticator: CaptureAuthenticator,
    host: str,
    port: int,
    hostname: str,
    tls_context: Optional[ssl.SSLContext] = None,
    transcript: Optional[TranscriptLogger] = None,
) -> asyncio.AbstractServer:
    """Bind the listening socket. An empty host listens on all interfaces."""
    loop = asyncio.get_running_loop()
    factory = functools.partial(
        TranscriptSMTP,
        handler,
        transcript=transcript,
        hostname=hostname,
        ident=IDENT,
        decode_data=False,
        tls_context=tls_context,
        require_starttls=False,
        auth_required=False,
        auth_require_tls=False,
        authenticator=authenticator,
    )
    return await loop.create_server(factory, host=host or None, port=port)


async def serve(
    handler: CaptureHandler,
    authenticator: CaptureAuthenticator,
    host: str,
    port: int,
    hostname: str,
    tls_context: Optional[ssl.SSLContext] = None,
    transcript: Optional[TranscriptLogger] = None,
) -> None:
    """Accept connections until cancelled."""
    server = await create_server(handler, authenticator, host, port, hostname, tls_context, transcript)
    logger.info(f"listening on {host}:{port}")
    async with server:
        await server.serve_forever()
