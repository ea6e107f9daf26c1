"""
Tests for the getSignaturesForAddress client.

Covers request shape (limit always, before only when given), snake_case/camelCase
mapping, and the Transport / Decode / RemoteRejected error split.
"""

from __future__ import annotations

import httpx
import pytest

from conftest import (
    ADDRESS,
    RPC_URL,
    ScriptedRpc,
    error_envelope,
    make_client,
    ok_envelope,
    sig_item,
)
from pulse2tx.core.exceptions import DecodeError, FetchError, RemoteRejected, TransportError
from pulse2tx.ledger import (
    LedgerSignatureClient,
    SignatureInfo,
    build_signatures_request,
    parse_signatures_response,
)


def test_build_request_without_before():
    body = build_signatures_request(ADDRESS, 30)
    assert body == {
        "jsonrpc": "2.0",
        "id": 1,
        "method": "getSignaturesForAddress",
        "params": [ADDRESS, {"limit": 30}],
    }


def test_build_request_with_before_keeps_limit():
    body = build_signatures_request(ADDRESS, 30, before="SigC")
    assert body["params"] == [ADDRESS, {"limit": 30, "before": "SigC"}]


def test_signature_info_maps_camel_case():
    info = SignatureInfo.from_rpc_item(sig_item("SigA", block_time=1_700_000_123, slot=42))
    assert info.signature == "SigA"
    assert info.slot == 42
    assert info.block_time == 1_700_000_123
    assert info.confirmation_status == "finalized"
    assert info.err is None


def test_signature_info_maps_snake_case():
    item = {"signature": "SigA", "slot": 1, "block_time": 99, "err": {"InstructionError": [0, "Custom"]}}
    info = SignatureInfo.from_rpc_item(item)
    assert info.block_time == 99
    assert info.err == {"InstructionError": [0, "Custom"]}


def test_signature_info_missing_block_time():
    info = SignatureInfo.from_rpc_item(sig_item("SigA", block_time=None))
    assert info.block_time is None


def test_signature_info_rejects_unrepresentable_block_time():
    with pytest.raises(ValueError):
        SignatureInfo.from_rpc_item(sig_item("SigA", block_time=10**20))


def test_parse_preserves_server_order():
    infos = parse_signatures_response(ok_envelope([sig_item("C"), sig_item("A"), sig_item("B")]))
    assert [i.signature for i in infos] == ["C", "A", "B"]


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"jsonrpc": "2.0", "id": 1},
        ok_envelope({"signature": "x"}),
        ok_envelope(["not-an-object"]),
        ok_envelope([{"slot": 1}]),
        ok_envelope([{"signature": "x", "slot": "not-a-number"}]),
        ok_envelope([sig_item("A", 10**20)]),
        ok_envelope([sig_item("A", -(10**20))]),
    ],
)
def test_parse_rejects_malformed(payload):
    with pytest.raises(DecodeError):
        parse_signatures_response(payload)


@pytest.mark.asyncio
async def test_fetch_page_success():
    rpc = ScriptedRpc(ok_envelope([sig_item("SigA"), sig_item("SigB")]))
    client = make_client(rpc)

    infos = await client.fetch_page(ADDRESS, 2, before="SigZ")

    assert [i.signature for i in infos] == ["SigA", "SigB"]
    assert rpc.requests[0]["method"] == "getSignaturesForAddress"
    assert rpc.requests[0]["params"] == [ADDRESS, {"limit": 2, "before": "SigZ"}]


@pytest.mark.asyncio
async def test_fetch_page_empty_result_is_not_an_error():
    client = make_client(ScriptedRpc(ok_envelope([])))
    assert await client.fetch_page(ADDRESS, 30) == []


@pytest.mark.asyncio
async def test_fetch_page_remote_rejected():
    client = make_client(ScriptedRpc(error_envelope(429, "Too many requests")))
    with pytest.raises(RemoteRejected) as exc_info:
        await client.fetch_page(ADDRESS, 30)
    assert exc_info.value.code == 429
    assert exc_info.value.message == "Too many requests"


@pytest.mark.asyncio
async def test_fetch_page_http_status_is_transport_error():
    client = make_client(ScriptedRpc(httpx.Response(503, text="upstream down")))
    with pytest.raises(TransportError) as exc_info:
        await client.fetch_page(ADDRESS, 30)
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_fetch_page_connect_error_is_transport_error():
    client = make_client(ScriptedRpc(httpx.ConnectError("connection refused")))
    with pytest.raises(TransportError):
        await client.fetch_page(ADDRESS, 30)


@pytest.mark.asyncio
async def test_fetch_page_invalid_json_is_decode_error():
    client = make_client(ScriptedRpc(httpx.Response(200, text="<html>oops</html>")))
    with pytest.raises(DecodeError):
        await client.fetch_page(ADDRESS, 30)


@pytest.mark.asyncio
async def test_fetch_errors_share_a_base():
    client = make_client(ScriptedRpc(error_envelope(-32602, "Invalid param")))
    with pytest.raises(FetchError):
        await client.fetch_page(ADDRESS, 30)


@pytest.mark.asyncio
async def test_fetch_page_no_retry():
    rpc = ScriptedRpc(error_envelope(429, "slow down"), ok_envelope([sig_item("SigA")]))
    client = make_client(rpc)
    with pytest.raises(RemoteRejected):
        await client.fetch_page(ADDRESS, 30)
    assert len(rpc.requests) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("address,limit", [("", 30), ("   ", 30), (ADDRESS, 0)])
async def test_fetch_page_rejects_bad_arguments(address, limit):
    rpc = ScriptedRpc()
    client = make_client(rpc)
    with pytest.raises(ValueError):
        await client.fetch_page(address, limit)
    assert rpc.requests == []


def test_client_requires_rpc_url():
    with pytest.raises(ValueError):
        LedgerSignatureClient("  ")


@pytest.mark.asyncio
async def test_owned_client_closes():
    async with LedgerSignatureClient(RPC_URL) as client:
        assert client is not None


@pytest.mark.asyncio
async def test_fetch_page_malformed_rpc_url_is_transport_error():
    rpc = ScriptedRpc()
    client = LedgerSignatureClient(
        "http://rpc.test:notaport/", http_client=httpx.AsyncClient(transport=httpx.MockTransport(rpc))
    )
    with pytest.raises(TransportError) as exc_info:
        await client.fetch_page(ADDRESS, 30)
    assert exc_info.value.status_code is None
    assert rpc.requests == []
