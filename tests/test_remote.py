"""
Pytest tests for the Postgrest/Storage client and the connectivity probe.
"""

from __future__ import annotations

import httpx
import pytest

BACKEND_URL = "https://project.example.supabase.co"
ANON_KEY = "anon-test-key"


def test_client_requires_url_and_key():
    """Missing configuration is reported before any request is made."""
    from devotional_core.core.exceptions import ConfigurationError
    from devotional_core.remote import PostgrestClient

    with pytest.raises(ConfigurationError):
        PostgrestClient("", ANON_KEY)
    with pytest.raises(ConfigurationError):
        PostgrestClient(BACKEND_URL, "")


def test_requests_carry_auth_headers(remote, backend):
    """Every request sends the anon key as apikey and bearer token."""
    remote.table("devotionals").select("*").execute()
    request = backend.requests[-1]
    assert request.headers["apikey"] == ANON_KEY
    assert request.headers["Authorization"] == f"Bearer {ANON_KEY}"
    assert request.url.path == "/rest/v1/devotionals"


def test_query_params(remote, backend):
    """Filters, order and limit are rendered in Postgrest syntax."""
    remote.table("subscriptions").select("tier_index").eq("user_id", "u1").eq("active", True).in_(
        "tier_index", [1, 2]
    ).order("expiry_date", ascending=False, nulls_last=True).limit(3).execute()
    params = backend.requests[-1].url.params
    assert params["select"] == "tier_index"
    assert params.get_list("user_id") == ["eq.u1"]
    assert params["active"] == "eq.true"
    assert params["tier_index"] == "in.(1,2)"
    assert params["order"] == "expiry_date.desc.nullslast"
    assert params["limit"] == "3"


def test_single_and_maybe_single(remote, backend):
    """single() raises NotFoundError when no row matches; maybe_single() returns None."""
    from devotional_core.core.exceptions import NotFoundError

    backend.seed("admin_settings", {"key": "admin_password", "value": "secret"})
    assert remote.table("admin_settings").eq("key", "admin_password").single()["value"] == "secret"
    assert remote.table("admin_settings").eq("key", "other").maybe_single() is None
    with pytest.raises(NotFoundError):
        remote.table("admin_settings").eq("key", "other").single()


def test_error_status_becomes_remote_error(remote, backend):
    """4xx/5xx answers raise RemoteError with status code and body."""
    from devotional_core.core.exceptions import RemoteError

    backend.fail("payments", 403)
    with pytest.raises(RemoteError) as excinfo:
        remote.table("payments").insert({"transaction_id": "t1"})
    assert excinfo.value.status_code == 403
    assert excinfo.value.is_permission_denied
    assert "forced failure" in excinfo.value.body


def test_transport_error_becomes_remote_error():
    """Network failures are wrapped too."""
    from devotional_core.core.exceptions import RemoteError
    from devotional_core.remote import PostgrestClient

    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with PostgrestClient(BACKEND_URL, ANON_KEY, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(RemoteError) as excinfo:
            client.table("devotionals").execute()
    assert excinfo.value.status_code is None
    assert not excinfo.value.is_permission_denied


def test_update_and_delete_use_filters(remote, backend):
    """PATCH and DELETE only touch matching rows."""
    backend.seed("users", {"id": 1, "name": "ada"}, {"id": 2, "name": "bea"})
    remote.table("users").eq("id", 1).update({"name": "ada2"})
    assert [r["name"] for r in backend.rows("users")] == ["ada2", "bea"]
    remote.table("users").eq("id", 2).delete()
    assert [r["id"] for r in backend.rows("users")] == [1]


def test_storage_upload_download_remove(remote, backend):
    """Objects are uploaded, fetched by public URL and removed by prefix."""
    key = remote.upload("profile-images", "u1/profile_1.jpg", b"jpeg-bytes", "image/jpeg", upsert=True)
    assert key == "profile-images/u1/profile_1.jpg"
    upload = backend.requests[-1]
    assert upload.headers["x-upsert"] == "true"
    assert upload.headers["Content-Type"] == "image/jpeg"

    url = remote.public_url("profile-images", "u1/profile_1.jpg")
    assert url == f"{BACKEND_URL}/storage/v1/object/public/profile-images/u1/profile_1.jpg"
    assert remote.download(url) == b"jpeg-bytes"

    remote.remove("profile-images", ["u1/profile_1.jpg"])
    assert backend.objects == {}


def test_connectivity_probe():
    """Any HTTP answer counts as online; transport errors count as offline."""
    from devotional_core.remote import check_connectivity

    assert check_connectivity(transport=httpx.MockTransport(lambda request: httpx.Response(204)))
    assert check_connectivity(transport=httpx.MockTransport(lambda request: httpx.Response(500)))

    def offline(request):
        raise httpx.ConnectError("no route", request=request)

    assert not check_connectivity(transport=httpx.MockTransport(offline))
