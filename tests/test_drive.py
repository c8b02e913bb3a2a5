"""Tests for the Google Drive client against a fake service object."""

import asyncio
import json
from types import SimpleNamespace

import pytest

pytest.importorskip("googleapiclient")

from googleapiclient.errors import HttpError

from treecopy import ConfigurationError, RemoteOperationError, load_tree
from treecopy.client import FOLDER_MIME_TYPE
from treecopy.drive import GoogleDriveClient


class FakeRequest:
    def __init__(self, result):
        self.result = result

    def execute(self):
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeFiles:
    """Stands in for ``service.files()``; records every request's kwargs."""

    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def _request(self, method, kwargs):
        self.requests.append((method, kwargs))
        return FakeRequest(self.responses[method].pop(0))

    def list(self, **kwargs):
        return self._request("list", kwargs)

    def create(self, **kwargs):
        return self._request("create", kwargs)

    def copy(self, **kwargs):
        return self._request("copy", kwargs)


class FakeService:
    def __init__(self, **responses):
        self._files = FakeFiles(responses)

    def files(self):
        return self._files


def http_error(status=404, message="File not found"):
    resp = SimpleNamespace(status=status, reason=message)
    content = json.dumps({"error": {"message": message}}).encode()
    return HttpError(resp, content)


class TestGoogleDriveClient:
    def test_list_children_request(self):
        service = FakeService(list=[{"files": [
            {"id": "1", "name": "a", "mimeType": FOLDER_MIME_TYPE},
        ], "nextPageToken": "tok"}])
        client = GoogleDriveClient(service, page_size=50)
        page = asyncio.run(client.list_children("src", "prev"))
        assert [e.id for e in page.entries] == ["1"]
        assert page.next_page_token == "tok"
        method, kwargs = service.files().requests[0]
        assert method == "list"
        assert kwargs["q"] == "'src' in parents and trashed=false"
        assert kwargs["pageToken"] == "prev"
        assert kwargs["pageSize"] == 50
        assert kwargs["supportsAllDrives"] is True
        assert kwargs["includeItemsFromAllDrives"] is True

    def test_list_first_page_has_no_token(self):
        service = FakeService(list=[{"files": []}])
        client = GoogleDriveClient(service, all_drives=False)
        page = asyncio.run(client.list_children("src"))
        assert page.entries == []
        assert page.next_page_token is None
        _, kwargs = service.files().requests[0]
        assert "pageToken" not in kwargs
        assert "supportsAllDrives" not in kwargs

    def test_query_quotes_id(self):
        service = FakeService(list=[{"files": []}])
        asyncio.run(GoogleDriveClient(service).list_children("it's"))
        _, kwargs = service.files().requests[0]
        assert kwargs["q"] == "'it\\'s' in parents and trashed=false"

    def test_create_folder(self):
        service = FakeService(create=[{"id": "new"}])
        new_id = asyncio.run(GoogleDriveClient(service).create_folder("Reports", "dest"))
        assert new_id == "new"
        _, kwargs = service.files().requests[0]
        assert kwargs["body"] == {
            "name": "Reports", "mimeType": FOLDER_MIME_TYPE, "parents": ["dest"],
        }

    def test_copy_file(self):
        service = FakeService(copy=[{"id": "c1"}])
        new_id = asyncio.run(GoogleDriveClient(service).copy_file("f1", "dest", "x.txt"))
        assert new_id == "c1"
        _, kwargs = service.files().requests[0]
        assert kwargs["fileId"] == "f1"
        assert kwargs["body"] == {"parents": ["dest"], "name": "x.txt"}

    def test_http_error_becomes_remote_error(self):
        service = FakeService(create=[http_error(403, "Rate limit exceeded")])
        with pytest.raises(RemoteOperationError, match="Failed to create folder") as excinfo:
            asyncio.run(GoogleDriveClient(service).create_folder("x", "dest"))
        assert isinstance(excinfo.value.__cause__, HttpError)

    def test_load_tree_through_drive(self):
        service = FakeService(list=[
            {"files": [{"id": "f", "name": "b.txt", "mimeType": "text/plain"}],
             "nextPageToken": "p2"},
            {"files": [{"id": "d", "name": "A", "mimeType": FOLDER_MIME_TYPE}]},
            {"files": []},
        ])
        tree = asyncio.run(load_tree(GoogleDriveClient(service), "src"))
        assert [n.path for n in tree] == ["/A", "/b.txt"]
        assert tree.find_path("/A").is_folder

    def test_missing_source_raises(self):
        service = FakeService(list=[http_error()])
        with pytest.raises(RemoteOperationError, match="Failed to list folder"):
            asyncio.run(load_tree(GoogleDriveClient(service), "nope"))


class TestFromTokenFile:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot load Google token"):
            GoogleDriveClient.from_token_file(str(tmp_path / "token.json"))

    def test_invalid_json(self, tmp_path):
        token = tmp_path / "token.json"
        token.write_text("{not json")
        with pytest.raises(ConfigurationError):
            GoogleDriveClient.from_token_file(str(token))
