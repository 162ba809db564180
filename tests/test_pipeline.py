import plistlib

import pytest

from strip_entitlements import pipeline
from strip_entitlements.errors import InspectionFailed, MalformedEntitlements


def _scenario() -> dict:
    return {
        "com.apple.application-identifier": "TEAMID.com.example.app",
        "com.apple.developer.aps-environment": "production",
        "com.apple.developer.team-identifier": "TEAMID",
        "com.apple.security.device.camera": True,
    }


def test_strip_app_entitlements_writes_filtered_plist(monkeypatch, tmp_path) -> None:
    out = tmp_path / "entitlements.xml"
    captured: dict = {}

    def fake_extract(app_path, codesign_path="", timeout=None):
        captured.update(app_path=app_path, codesign_path=codesign_path, timeout=timeout)
        return _scenario()

    monkeypatch.setattr(pipeline, "extract_entitlements", fake_extract)

    removed = pipeline.strip_app_entitlements(
        "/tmp/Example.app", str(out), codesign_path="/opt/codesign", timeout=3.0
    )

    assert removed == [
        "com.apple.application-identifier",
        "com.apple.developer.aps-environment",
        "com.apple.developer.team-identifier",
    ]
    assert plistlib.loads(out.read_bytes()) == {"com.apple.security.device.camera": True}
    assert captured == {
        "app_path": "/tmp/Example.app",
        "codesign_path": "/opt/codesign",
        "timeout": 3.0,
    }


def test_strip_app_entitlements_output_is_stable_across_runs(monkeypatch, tmp_path) -> None:
    first = tmp_path / "first.xml"
    second = tmp_path / "second.xml"
    monkeypatch.setattr(pipeline, "extract_entitlements", lambda *_a, **_k: _scenario())
    pipeline.strip_app_entitlements("/tmp/Example.app", str(first))

    stripped = plistlib.loads(first.read_bytes())
    monkeypatch.setattr(pipeline, "extract_entitlements", lambda *_a, **_k: dict(stripped))
    removed = pipeline.strip_app_entitlements("/tmp/Example.app", str(second))

    assert removed == []
    assert first.read_bytes() == second.read_bytes()


def test_strip_app_entitlements_creates_no_file_on_inspection_failure(monkeypatch, tmp_path) -> None:
    out = tmp_path / "entitlements.xml"

    def fake_extract(*_args, **_kwargs):
        raise InspectionFailed(1, "", "code object is not signed at all")

    monkeypatch.setattr(pipeline, "extract_entitlements", fake_extract)

    with pytest.raises(InspectionFailed) as e:
        pipeline.strip_app_entitlements("/tmp/Example.app", str(out))
    assert e.value.stderr == "code object is not signed at all"
    assert not out.exists()


def test_strip_app_entitlements_creates_no_file_on_malformed_output(monkeypatch, tmp_path) -> None:
    out = tmp_path / "entitlements.xml"

    def fake_extract(*_args, **_kwargs):
        raise MalformedEntitlements("Entitlements root is not a dictionary (got list)")

    monkeypatch.setattr(pipeline, "extract_entitlements", fake_extract)

    with pytest.raises(MalformedEntitlements):
        pipeline.strip_app_entitlements("/tmp/Example.app", str(out))
    assert not out.exists()


def test_list_app_entitlements_returns_sorted_keys(monkeypatch) -> None:
    ent = {
        "com.apple.developer.team-identifier": "TEAMID",
        "com.apple.security.device.camera": True,
        "com.apple.developer.aps-environment": "production",
        "com.apple.application-identifier": "TEAMID.com.example.app",
    }
    monkeypatch.setattr(pipeline, "extract_entitlements", lambda *_a, **_k: ent)

    assert pipeline.list_app_entitlements("/tmp/Example.app") == [
        "com.apple.application-identifier",
        "com.apple.developer.aps-environment",
        "com.apple.developer.team-identifier",
    ]
    assert len(ent) == 4


def test_print_provisioned_entitlements_none_found(capsys) -> None:
    pipeline.print_provisioned_entitlements([])
    assert capsys.readouterr().out == "No provisioned entitlements found.\n"


def test_print_provisioned_entitlements_lists_keys(capsys) -> None:
    pipeline.print_provisioned_entitlements(
        ["com.apple.application-identifier", "com.apple.developer.team-identifier"]
    )
    assert capsys.readouterr().out == (
        "Provisioned entitlements found:\n"
        "  - com.apple.application-identifier\n"
        "  - com.apple.developer.team-identifier\n"
    )


def test_pipeline_module_has_docstring() -> None:
    assert pipeline.__doc__ is not None
    assert "输出" in pipeline.__doc__
