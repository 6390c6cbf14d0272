"""Tests for writing intents to disk."""

from pathlib import Path

import pytest

from conftest import FakeHost
from pplx_chat.core import ActionIntent, ActionOrigin
from pplx_chat.materializer import FileMaterializer, MaterializationError


def _intent(filename, code="print('hi')"):
    return ActionIntent(filename=filename, code=code, origin=ActionOrigin.EXPLICIT_USER_REQUEST)


class TestResolvePath:
    def test_bare_name_goes_to_first_workspace_root(self, tmp_path):
        first, second = tmp_path / "one", tmp_path / "two"
        materializer = FileMaterializer(FakeHost(), [first, second])
        assert materializer.resolve_path("app.py") == first / "app.py"

    def test_bare_name_without_workspace_is_used_as_given(self):
        materializer = FileMaterializer(FakeHost(), [])
        assert materializer.resolve_path("app.py") == Path("app.py")

    @pytest.mark.parametrize("name", ["src/app.py", "src\\app.py", "/tmp/app.py"])
    def test_names_with_separators_are_not_rebased(self, tmp_path, name):
        materializer = FileMaterializer(FakeHost(), [tmp_path])
        assert materializer.resolve_path(name) == Path(name)


class TestMaterialize:
    @pytest.mark.asyncio
    async def test_creates_new_file_and_opens_it(self, workspace):
        host = FakeHost()
        outcome = await FileMaterializer(host, [workspace]).materialize(_intent("hello.py"))

        target = workspace / "hello.py"
        assert target.read_text(encoding="utf-8") == "print('hi')"
        assert outcome.path == target
        assert outcome.created is True
        assert outcome.overwritten is False
        assert host.questions == []
        assert host.opened == [(target, "print('hi')")]

    @pytest.mark.asyncio
    async def test_creates_missing_parent_directories(self, workspace):
        target = workspace / "pkg" / "sub" / "mod.py"
        outcome = await FileMaterializer(FakeHost(), [workspace]).materialize(_intent(str(target)))
        assert outcome.created
        assert target.read_text(encoding="utf-8") == "print('hi')"

    @pytest.mark.asyncio
    async def test_existing_file_declined_is_untouched(self, workspace):
        target = workspace / "keep.txt"
        target.write_text("original", encoding="utf-8")
        host = FakeHost(answers=[False])

        outcome = await FileMaterializer(host, [workspace]).materialize(_intent("keep.txt", "new"))

        assert target.read_text(encoding="utf-8") == "original"
        assert outcome.written is False
        assert host.opened == []
        assert host.questions == [f"File {target} already exists. Do you want to overwrite it?"]

    @pytest.mark.asyncio
    async def test_existing_file_confirmed_is_fully_replaced(self, workspace):
        target = workspace / "replace.txt"
        target.write_text("a much longer original body\nwith two lines\n", encoding="utf-8")
        host = FakeHost(answers=[True])

        outcome = await FileMaterializer(host, [workspace]).materialize(_intent("replace.txt", "short"))

        assert target.read_text(encoding="utf-8") == "short"
        assert outcome.overwritten is True
        assert outcome.created is False
        assert host.opened == [(target, "short")]

    @pytest.mark.asyncio
    async def test_write_failure_is_reported(self, workspace):
        (workspace / "adir").mkdir()
        host = FakeHost(answers=[True])

        with pytest.raises(MaterializationError, match="Failed to create file adir"):
            await FileMaterializer(host, [workspace]).materialize(_intent("adir"))
        assert host.opened == []

    @pytest.mark.asyncio
    async def test_confirmation_failure_is_reported(self, workspace):
        (workspace / "x.txt").write_text("old", encoding="utf-8")
        host = FakeHost(fail_on_confirm=True)

        with pytest.raises(MaterializationError, match="dialog failed"):
            await FileMaterializer(host, [workspace]).materialize(_intent("x.txt"))
        assert (workspace / "x.txt").read_text(encoding="utf-8") == "old"

    @pytest.mark.asyncio
    async def test_open_failure_keeps_write_outcome(self, workspace):
        host = FakeHost(fail_on_open=True)

        outcome = await FileMaterializer(host, [workspace]).materialize(_intent("shown.py"))

        assert outcome.created is True
        assert (workspace / "shown.py").read_text(encoding="utf-8") == "print('hi')"
