"""Integration tests for the template file sync tool."""

import json

import responses

from conftest import b64
from template_sync.context import RunContext
from template_sync.dispatch import OutcomeKind
from template_sync.github import GitHubClient
from template_sync.sync import FileSync

API = "https://api.github.com"
SOURCE = f"{API}/repos/acme/templates"

CONFIG_YAML = """syncs:
  - files:
      - src: a.txt
      - src: b.sh
      - src: docs
    repos:
      - x/y
      - z
"""


def add_destination(rsps, owner: str, repo: str, ref_status: int = 201) -> None:
    """Register the Git Data API flow for one destination."""
    prefix = f"{API}/repos/{owner}/{repo}"
    rsps.add(responses.GET, prefix, json={"default_branch": "main"})
    rsps.add(responses.GET, f"{prefix}/git/ref/heads/main", json={"object": {"sha": "base"}})
    rsps.add(
        responses.GET, f"{prefix}/git/commits/base", json={"sha": "base", "tree": {"sha": "t0"}}
    )
    rsps.add(responses.POST, f"{prefix}/git/blobs", json={"sha": "b1"}, status=201)
    rsps.add(responses.POST, f"{prefix}/git/blobs", json={"sha": "b2"}, status=201)
    rsps.add(responses.POST, f"{prefix}/git/trees", json={"sha": "t1"}, status=201)
    rsps.add(responses.POST, f"{prefix}/git/commits", json={"sha": "c1"}, status=201)
    if ref_status == 422:
        rsps.add(
            responses.POST,
            f"{prefix}/git/refs",
            json={"message": "Reference already exists"},
            status=422,
        )
    else:
        rsps.add(responses.POST, f"{prefix}/git/refs", json={}, status=201)
        rsps.add(
            responses.POST,
            f"{prefix}/pulls",
            json={"number": 3, "html_url": f"https://github.com/{owner}/{repo}/pull/3"},
            status=201,
        )


class TestIntegration:
    """Integration tests using the REST client against mocked GitHub endpoints."""

    def test_sync_to_two_destinations(self, context: RunContext) -> None:
        """Test a full run: one destination gets a new PR, one already has it."""
        with responses.RequestsMock() as rsps:
            rsps.add(
                responses.GET,
                f"{SOURCE}/contents/.github/file-sync.yml",
                json={"type": "file", "encoding": "base64", "content": b64(CONFIG_YAML)},
            )
            rsps.add(
                responses.GET,
                f"{SOURCE}/contents/a.txt",
                json={"type": "file", "encoding": "base64", "content": b64("A") + "\n"},
            )
            rsps.add(
                responses.GET,
                f"{SOURCE}/contents/b.sh",
                json={"type": "file", "encoding": "base64", "content": b64("B")},
            )
            rsps.add(
                responses.GET,
                f"{SOURCE}/contents/docs",
                json=[{"type": "file", "path": "docs/index.md"}],
            )
            add_destination(rsps, "x", "y")
            add_destination(rsps, "acme", "z", ref_status=422)

            with GitHubClient(token="t") as client:
                result = FileSync(client, context).run()

            assert result.is_success
            assert [(str(dest), o.kind) for dest, o in result.outcomes] == [
                ("x/y", OutcomeKind.CREATED),
                ("acme/z", OutcomeKind.ALREADY_EXISTS),
            ]
            assert result.created[0].url == "https://github.com/x/y/pull/3"

            trees = [
                json.loads(call.request.body)
                for call in rsps.calls
                if call.request.url == f"{API}/repos/x/y/git/trees"
            ]
            assert [entry["path"] for entry in trees[0]["tree"]] == ["a.txt", "b.sh"]
            assert [entry["mode"] for entry in trees[0]["tree"]] == ["100644", "100755"]

            source_reads = [
                call.request
                for call in rsps.calls
                if call.request.url.startswith(f"{SOURCE}/contents/")
            ]
            assert len(source_reads) == 4
            assert all(req.params == {"ref": context.sha} for req in source_reads)

    def test_dry_run_makes_no_destination_calls(self, context: RunContext) -> None:
        """Test that a dry run only reads from the source repository."""
        with responses.RequestsMock() as rsps:
            rsps.add(
                responses.GET,
                f"{SOURCE}/contents/.github/file-sync.yml",
                json={"type": "file", "encoding": "base64", "content": b64(CONFIG_YAML)},
            )
            for path in ("a.txt", "b.sh", "docs"):
                rsps.add(
                    responses.GET,
                    f"{SOURCE}/contents/{path}",
                    json={"type": "file", "encoding": "base64", "content": b64(path)},
                )

            dry_context = RunContext(
                repo=context.repo,
                sha=context.sha,
                run_id=context.run_id,
                html_url=context.html_url,
                dry_run=True,
            )
            with GitHubClient(token="t") as client:
                result = FileSync(client, dry_context).run()

            assert all(call.request.method == "GET" for call in rsps.calls)
            assert all(call.request.url.startswith(SOURCE) for call in rsps.calls)
            assert [o.kind for _, o in result.outcomes] == [OutcomeKind.DRY_RUN] * 2
