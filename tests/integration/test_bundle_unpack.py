"""Integration tests for end-to-end bundle unpacking."""

from __future__ import annotations

import json

import httpx

from tests.bundle_builder import build_bundle, build_data_item, build_metadata_item
from unpacker import UnpackClient

BUNDLE_ID = "bNbA3TEQVL60xlgCcqdz4ZPHFZ711cZ3hmkpGttDt_U"


def _drive_bundle() -> tuple[bytes, dict[str, str]]:
    """Build a bundle mixing pairs in both orders, a folder, an orphan and an ordinary item."""
    first_data = build_data_item([("App-Name", "ArDrive-Web"), ("Content-Type", "text/plain")], b"one")
    second_data = build_data_item([("App-Name", "ArDrive-CLI")], b"two")
    first_metadata = build_metadata_item({"dataTxId": first_data[0], "name": "one.txt"})
    second_metadata = build_metadata_item({"dataTxId": second_data[0], "name": "two.txt"})
    folder_metadata = build_metadata_item({"name": "Documents", "entityType": "folder"})
    orphan_data = build_data_item([("App-Name", "ArDrive-Desktop")], b"orphan")
    ordinary = build_data_item([("Content-Type", "image/png")], b"\x89PNG")
    items = [
        first_data,
        second_metadata,
        folder_metadata,
        first_metadata,
        orphan_data,
        second_data,
        ordinary,
    ]
    ids = {
        "first_data": first_data[0],
        "second_data": second_data[0],
        "first_metadata": first_metadata[0],
        "second_metadata": second_metadata[0],
        "folder_metadata": folder_metadata[0],
        "orphan_data": orphan_data[0],
        "ordinary": ordinary[0],
    }
    return build_bundle(items), ids


def _load(path) -> dict[str, object]:
    return json.loads(path.read_text(encoding="utf-8"))


def test_drive_bundle_unpacks_into_expected_artifacts(unpack_config) -> None:
    """Every item should yield one payload file and records should reconcile."""
    bundle_bytes, ids = _drive_bundle()
    (unpack_config.input_dir / "drive-bundle").write_bytes(bundle_bytes)
    client = UnpackClient(unpack_config)

    report = client.process_all()
    output_dir = unpack_config.output_dir / "drive-bundle"
    record_names = sorted(path.name for path in output_dir.glob("*.TAGS.json"))

    result = report.results[0]
    assert (result.merged_count, result.orphans_flushed, result.orphaned_metadata_dropped) == (2, 1, 0)
    assert record_names == sorted(
        f"{ids[key]}.TAGS.json"
        for key in ("first_data", "second_data", "folder_metadata", "orphan_data", "ordinary")
    )
    assert _load(output_dir / f"{ids['first_data']}.TAGS.json")["metadata"]["name"] == "one.txt"
    assert _load(output_dir / f"{ids['second_data']}.TAGS.json")["metaDataItemTxId"] == ids[
        "second_metadata"
    ]
    assert "metadata" not in _load(output_dir / f"{ids['orphan_data']}.TAGS.json")
    assert (output_dir / ids["ordinary"]).read_bytes() == b"\x89PNG"
    assert result.artifacts_written == 7 + 5


def test_rerun_produces_identical_output(unpack_config) -> None:
    """Unpacking the same bundle twice should leave byte-identical files."""
    bundle_bytes, _ = _drive_bundle()
    (unpack_config.input_dir / "drive-bundle").write_bytes(bundle_bytes)
    client = UnpackClient(unpack_config)
    output_dir = unpack_config.output_dir / "drive-bundle"

    client.process_all()
    first_pass = {path.name: path.read_bytes() for path in output_dir.iterdir()}
    client.process_all()
    second_pass = {path.name: path.read_bytes() for path in output_dir.iterdir()}

    assert first_pass == second_pass


def test_tampered_bundle_fails_without_blocking_others(unpack_config) -> None:
    """A bundle failing verification should not affect sibling bundles."""
    good_bytes, _ = _drive_bundle()
    item_id, body = build_data_item([("App-Name", "ArDrive-Web")], b"genuine")
    tampered = body[: -len(b"genuine")] + b"forged!"
    (unpack_config.input_dir / "good").write_bytes(good_bytes)
    (unpack_config.input_dir / "tampered").write_bytes(build_bundle([(item_id, tampered)]))
    client = UnpackClient(unpack_config)

    report = client.process_all()

    assert [result.bundle_name for result in report.results] == ["good"]
    assert [failure.bundle_name for failure in report.failures] == ["tampered"]
    assert not (unpack_config.output_dir / "tampered").exists()


def test_fetch_then_unpack_uses_gateway_once(unpack_config) -> None:
    """A fetched bundle should be cached so a second run skips the gateway."""
    bundle_bytes, _ = _drive_bundle()
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        return httpx.Response(200, content=bundle_bytes)

    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    client = UnpackClient(unpack_config, http_client)

    first_report = client.process_all(BUNDLE_ID)
    second_report = client.process_all(BUNDLE_ID)

    assert requests == [f"/{BUNDLE_ID}"]
    assert first_report.results[0].merged_count == second_report.results[0].merged_count == 2
