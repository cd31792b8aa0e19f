import json

import httpx
import pytest

from oer_search.index.client import (
    DocumentNotFoundError,
    IndexClient,
    IndexRequestError,
    IndexResponseError,
)


def make_client(handler):
    transport = httpx.MockTransport(handler)
    return IndexClient(
        "http://es:9200",
        "oer_materials",
        client=httpx.AsyncClient(transport=transport, base_url="http://es:9200"),
    )


@pytest.mark.asyncio
async def test_search_posts_query_document():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"hits": {"total": {"value": 0}, "hits": []}})

    client = make_client(handler)
    output = await client.search({"query": {"match_all": {}}})

    assert seen == {
        "method": "POST",
        "path": "/oer_materials/_search",
        "body": {"query": {"match_all": {}}},
    }
    assert output["hits"]["hits"] == []
    await client.aclose()


@pytest.mark.asyncio
async def test_index_document_puts_by_id():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(201, json={"result": "created"})

    client = make_client(handler)
    await client.index_document(42, {"material_id": 42})

    assert seen == {"method": "PUT", "path": "/oer_materials/_doc/42"}


@pytest.mark.asyncio
async def test_update_wraps_partial_document():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"result": "updated"})

    client = make_client(handler)
    await client.update_document(42, {"title": "New"})

    assert seen == {"path": "/oer_materials/_update/42", "body": {"doc": {"title": "New"}}}


@pytest.mark.asyncio
async def test_update_missing_document():
    client = make_client(lambda request: httpx.Response(404, json={"error": "document_missing_exception"}))

    with pytest.raises(DocumentNotFoundError) as excinfo:
        await client.update_document(42, {"title": "New"})
    assert excinfo.value.doc_id == 42


@pytest.mark.asyncio
async def test_delete_missing_document():
    client = make_client(lambda request: httpx.Response(404, json={"result": "not_found"}))

    with pytest.raises(DocumentNotFoundError):
        await client.delete_document(42)


@pytest.mark.asyncio
async def test_refresh():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        return httpx.Response(200, json={"_shards": {"total": 1}})

    client = make_client(handler)
    await client.refresh()

    assert seen["path"] == "/oer_materials/_refresh"


@pytest.mark.asyncio
async def test_error_status_is_raised():
    client = make_client(lambda request: httpx.Response(500, text="search_phase_execution_exception"))

    with pytest.raises(IndexResponseError) as excinfo:
        await client.search({"query": {}})
    assert excinfo.value.status_code == 500
    assert "search_phase_execution_exception" not in str(excinfo.value)


@pytest.mark.asyncio
async def test_unreachable_engine():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(IndexRequestError):
        await client.search({"query": {}})
