import pytest

from src.config import FileSDConfig, TLSConfiguration


@pytest.fixture
def sd_config():
    return FileSDConfig(files=["/etc/query/sd/*.yaml"], refresh_interval="1m")


@pytest.fixture
def client_tls():
    return TLSConfiguration(
        cert_file="/certs/client.crt",
        key_file="/certs/client.key",
        ca_file="/certs/ca.crt",
        server_name="store.example.com",
    )


@pytest.fixture
def two_group_document():
    return b"""
- name: eu
  tls_config:
    ca_file: /certs/eu-ca.crt
  endpoints:
    - store-eu-0:10901
    - store-eu-1:10901
  endpoints_sd_files:
    - files: ["/etc/query/sd/eu-*.json"]
- name: pinned
  mode: strict
  endpoints:
    - store-pinned:10901
"""
