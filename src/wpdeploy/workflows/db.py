# workflows/db.py
from __future__ import annotations

import posixpath
import shlex
from typing import List, Mapping, Tuple

from ..dsl import rsync, sh, ssh
from ..errors import ConfigurationError
from ..model import Artifact, DeployOptions, ResolvedConfig, Step
from ..runner import Runner
from ..settings import WP_CLI


def need(c: Mapping[str, str], *keys: str) -> None:
    """Fail early when a runtime fact the workflow relies on did not resolve."""
    unresolved = [k for k in keys if k not in c]
    if unresolved:
        raise ConfigurationError(env=c.get("env", "?"), unresolved=unresolved)


def _wp(*args: str) -> str:
    return " ".join([WP_CLI, *(shlex.quote(a) for a in args)])


def _mysql_auth(c: Mapping[str, str]) -> str:
    return (
        f"--user={shlex.quote(c['db_user'])}"
        f" --password={shlex.quote(c['db_password'])}"
        f" --host={shlex.quote(c['db_host'])}"
    )


def dump_db(c: ResolvedConfig, runner: Runner, path: str) -> Tuple[List[Artifact], Step]:
    """
    Export the local database to `path`, rewritten for the remote site.

    The local database is backed up, rewritten, exported and restored, so it
    ends up unchanged. Returns the backup artifacts and the step writing `path`.
    """
    need(c, "abspath", "siteurl", "tmp", "url", "path")

    url_differs = c["siteurl"] != c["url"]
    path_differs = c["abspath"] != c["path"]
    rewrite = url_differs or path_differs
    tmp = c["tmp"]

    backup = sh(_wp("db", "export", tmp), f"Exported a local backup of the database to '{tmp}'.", when=rewrite)
    runner.add(backup)
    runner.add(
        sh(
            _wp("search-replace", "--all-tables", c["siteurl"], c["url"]),
            f"Replaced '{c['siteurl']}' with '{c['url']}' in local database.",
            "Failed replacing the site url in local database.",
        ),
        when=url_differs,
    )
    runner.add(
        sh(
            _wp("search-replace", "--all-tables", c["abspath"], c["path"]),
            f"Replaced '{c['abspath']}' with '{c['path']}' in local database.",
            "Failed replacing the site path in local database.",
        ),
        when=path_differs,
    )
    export = sh(
        _wp("db", "export", path),
        f"Dumped the database to '{path}'.",
        f"Failed dumping the database to '{path}'.",
    )
    runner.add(export)
    runner.add(sh(_wp("db", "import", tmp), "Imported the local backup."), when=rewrite)

    cleanup = sh(f"rm -f {shlex.quote(tmp)}", "Cleaned up.", when=rewrite)
    runner.add(cleanup)

    artifacts = [Artifact(tmp, created_by=backup, removed_by=cleanup)] if rewrite else []
    return artifacts, export


def dump(c: ResolvedConfig, runner: Runner, opts: DeployOptions) -> List[Artifact]:
    need(c, "wd")
    path = opts.file or f"{c['wd']}/{c['env']}_{c['timestamp']}.sql"
    artifacts, _ = dump_db(c, runner, path)
    return artifacts


def push_db(c: ResolvedConfig, runner: Runner, opts: DeployOptions) -> List[Artifact]:
    """Dump locally, upload the dump and import it on the server."""
    need(c, "tmp_path", "local_hostname")

    dump_file = f"{c['tmp_path']}/{posixpath.basename(c['tmp'])}.sql"
    artifacts, export = dump_db(c, runner, dump_file)

    server_file = f"{c['local_hostname']}_{c['env']}.sql"
    remote_path = f"{c['writable_path']}/{server_file}"
    port = c.get("port")

    upload = sh(
        rsync(dump_file, f"{c['ssh']}:{remote_path}", port),
        f"Uploaded the database file to '{remote_path}' on the server.",
        "Failed to upload the database to the server.",
    )
    runner.add(upload)

    remove_local = sh(f"rm -f {shlex.quote(dump_file)}")
    runner.add(remove_local)

    runner.add(
        sh(
            ssh(
                c["ssh"],
                port,
                f"cd {shlex.quote(c['writable_path'])};"
                f" mysql {_mysql_auth(c)} {shlex.quote(c['db_name'])} < {shlex.quote(server_file)}",
            ),
            "Deployed the database on server.",
            "Failed deploying the db on server.",
        )
    )

    remove_remote = sh(
        ssh(c["ssh"], port, f"cd {shlex.quote(c['writable_path'])}; rm -f {shlex.quote(server_file)}"),
        "Deleted the server dump.",
    )
    runner.add(remove_remote)

    return artifacts + [
        Artifact(dump_file, created_by=export, removed_by=remove_local),
        Artifact(remote_path, remote=True, created_by=upload, removed_by=remove_remote),
    ]


def pull_db(c: ResolvedConfig, runner: Runner, opts: DeployOptions) -> List[Artifact]:
    """Dump the remote database, copy it down and import it locally."""
    need(c, "wd", "bk_path", "abspath", "siteurl")

    server_file = f"{c['env']}_{c['timestamp']}.sql"
    remote_path = f"{c['writable_path']}/{server_file}"
    local_file = f"{c['wd']}/{server_file}"
    writable = shlex.quote(c["writable_path"])
    port = c.get("port")

    remote_dump = sh(
        ssh(
            c["ssh"],
            port,
            f"mkdir -p {writable}; cd {writable};"
            f" mysqldump {_mysql_auth(c)} --single-transaction"
            f" --add-drop-table {shlex.quote(c['db_name'])} > {shlex.quote(server_file)}",
        ),
        f"Dumped the remote database to '{remote_path}' on the server.",
        "Failed dumping the remote database.",
    )
    runner.add(remote_dump)

    download = sh(
        rsync(f"{c['ssh']}:{remote_path}", local_file, port, delete=False, compress=False),
        f"Copied the database from the server to '{local_file}'.",
        "Failed copying the database from the server.",
    )
    runner.add(download)

    remove_remote = sh(
        ssh(c["ssh"], port, f"cd {writable}; rm -f {shlex.quote(server_file)}"),
        "Deleted the server dump.",
    )
    runner.add(remove_remote)

    backup_file = f"{c['bk_path']}/{c['timestamp']}.sql"
    runner.add(
        sh(_wp("db", "export", backup_file), f"Backed up local database to '{backup_file}'"),
        when=opts.backup is not False,
    )

    runner.add(
        sh(_wp("db", "import", local_file), "Imported the remote database.", "Failed importing the remote database.")
    )

    runner.add(
        sh(
            _wp("search-replace", "--all-tables", c["url"], c["siteurl"]),
            f"Replaced '{c['url']}' with '{c['siteurl']}' on the imported database.",
        ),
        when=c["siteurl"] != c["url"],
    )
    runner.add(
        sh(
            _wp("search-replace", "--all-tables", c["path"], c["abspath"]),
            f"Replaced '{c['path']}' with '{c['abspath']}' on local database.",
        ),
        when=c["abspath"] != c["path"],
    )

    artifacts = [Artifact(remote_path, remote=True, created_by=remote_dump, removed_by=remove_remote)]
    if opts.cleanup:
        remove_local = sh(f"rm -f {shlex.quote(local_file)}", f"Removed the pulled dump '{local_file}'.")
        runner.add(remove_local)
        artifacts.append(Artifact(local_file, created_by=download, removed_by=remove_local))

    return artifacts
