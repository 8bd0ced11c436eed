"""SSLContext factories for the shipper and the test collector.

Trust policy: the shipper verifies the collector certificate and hostname
against the platform trust store. There is no certificate pinning. An extra
CA bundle may be added for private collectors; it extends the platform
store rather than replacing it.
"""

import ssl


def create_client_context(ca_file: str = "") -> ssl.SSLContext:
    """Create a verifying client context backed by the platform CA store."""
    ctx = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if ca_file:
        ctx.load_verify_locations(cafile=ca_file)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    return ctx


def create_server_context(cert_file: str, key_file: str) -> ssl.SSLContext:
    """Create an SSL context for the test collector."""
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    ctx.load_cert_chain(certfile=cert_file, keyfile=key_file)
    ctx.minimum_version = ssl.TLSVersion.TLSv1_2
    return ctx
