"""Tests for Kubernetes secrets utilities."""

from __future__ import annotations

import base64
from unittest.mock import Mock

import pytest
from kubernetes import client

from argocd_register_operator.utils.errors import ConfigurationError, NotFoundError, TransientError
from argocd_register_operator.utils.secrets import decode_token, read_secret_data


class TestReadSecretData:
    """Test cases for read_secret_data function."""

    def test_read_secret_data_success(self):
        """Test reading and decoding all secret values."""
        mock_api = Mock()
        mock_secret = Mock()
        mock_secret.data = {
            "kubeconfig": base64.b64encode(b"apiVersion: v1").decode("utf-8"),
            "raw": b"already-bytes",
        }
        mock_api.read_namespaced_secret.return_value = mock_secret

        result = read_secret_data(mock_api, "test", "test")

        assert result == {"kubeconfig": b"apiVersion: v1", "raw": b"already-bytes"}
        mock_api.read_namespaced_secret.assert_called_once_with(name="test", namespace="test")

    def test_read_secret_without_data(self):
        """Test that a secret with no data yields an empty mapping."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.return_value = Mock(data=None)

        assert read_secret_data(mock_api, "test", "test") == {}

    def test_read_secret_not_found(self):
        """Test that a missing secret raises NotFoundError."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=404)

        with pytest.raises(NotFoundError, match="Secret 'argocd-secret' not found in namespace 'argocd'"):
            read_secret_data(mock_api, "argocd", "argocd-secret")

    def test_read_secret_api_failure(self):
        """Test that other API failures are transient."""
        mock_api = Mock()
        mock_api.read_namespaced_secret.side_effect = client.exceptions.ApiException(status=500, reason="boom")

        with pytest.raises(TransientError):
            read_secret_data(mock_api, "argocd", "argocd-secret")


class TestDecodeToken:
    """Test cases for decode_token function."""

    def test_decode_token(self):
        data = {"admin.password": base64.b64encode(b"token-test")}

        assert decode_token(data, "admin.password", "argocd-secret") == "token-test"

    def test_missing_key(self):
        with pytest.raises(ConfigurationError, match="admin.password not found in secret 'argocd-secret'"):
            decode_token({}, "admin.password", "argocd-secret")

    def test_missing_key_without_secret_name(self):
        with pytest.raises(ConfigurationError, match="admin.password not found in secret"):
            decode_token({}, "admin.password")

    def test_invalid_base64(self):
        with pytest.raises(ConfigurationError, match="is not valid base64"):
            decode_token({"admin.password": b"%%%"}, "admin.password")
