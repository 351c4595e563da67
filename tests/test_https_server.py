from __future__ import annotations

import socket
import ssl
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.x509.oid import NameOID

from folderServer import STYLE, ServerConfig, folderServer
from folderServer.tls import generate_self_signed_credential


def _http_get_tls(port: int, path: str, timeout: float = 2.0) -> bytes:
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    s = socket.create_connection(("127.0.0.1", port), timeout=timeout)
    try:
        ss = ctx.wrap_socket(s, server_hostname="localhost")
        try:
            ss.sendall(f"GET {path} HTTP/1.1\r\nHost: 127.0.0.1\r\nConnection: close\r\n\r\n".encode("utf-8"))
            ss.settimeout(timeout)
            data = b""
            while True:
                part = ss.recv(4096)
                if not part:
                    break
                data += part
            return data
        finally:
            ss.close()
    finally:
        s.close()


def _http_get_plain(port: int, path: str, timeout: float = 2.0) -> bytes:
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        s.sendall(f"GET {path} HTTP/1.1\r\nHost: 127.0.0.1\r\nConnection: close\r\n\r\n".encode("utf-8"))
        data = b""
        while True:
            part = s.recv(4096)
            if not part:
                break
            data += part
        return data


def _headers_and_body(resp: bytes) -> tuple[dict[str, str], bytes]:
    head, _, body = resp.partition(b"\r\n\r\n")
    hdrs = {}
    for line in head.decode("latin-1").split("\r\n")[1:]:
        k, _, v = line.partition(":")
        hdrs[k.strip().lower()] = v.strip()
    return hdrs, body


def test_https_serves_with_generated_certificate(site: Path, running) -> None:
    cred = generate_self_signed_credential()
    for server in running(site, credential=cred):
        assert server.scheme == "https"
        resp = _http_get_tls(server.sock_port, "/docs/report.pdf")
        assert b"200 OK" in resp
        hdrs, body = _headers_and_body(resp)
        assert body == b"%PDF-1.4 fake"
        assert hdrs["content-disposition"] == 'attachment; filename="report.pdf"'
        assert _headers_and_body(_http_get_tls(server.sock_port, "/images/"))[1].endswith(STYLE)


def test_https_presents_localhost_certificate(site: Path, running) -> None:
    cred = generate_self_signed_credential()
    for server in running(site, credential=cred):
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        with socket.create_connection(("127.0.0.1", server.sock_port), timeout=2.0) as raw:
            with ctx.wrap_socket(raw, server_hostname="localhost") as tls:
                der = tls.getpeercert(binary_form=True)
        cert = x509.load_der_x509_certificate(der)
        assert cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "localhost"
        assert cert.serial_number == cred.certificate.serial_number


def test_plain_http_client_is_refused(site: Path, running) -> None:
    """No silent downgrade: a cleartext request does not get a file back."""
    for server in running(site, credential=generate_self_signed_credential()):
        try:
            resp = _http_get_plain(server.sock_port, "/notes/readme.txt")
        except OSError:
            resp = b""
        assert b"just text" not in resp


def test_bad_credential_fails_start(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import folderServer.server as server_mod

    def _boom(credential):
        raise ssl.SSLError("bad key")

    monkeypatch.setattr(server_mod, "build_ssl_context", _boom)
    server = folderServer(ServerConfig(port=0, folder=tmp_path, https=True, host="127.0.0.1"), credential=generate_self_signed_credential())
    with pytest.raises(ssl.SSLError):
        server.start()
    assert server.sock_port is None
