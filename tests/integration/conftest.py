from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from textwrap import dedent

import pytest

SRC_DIR = Path(__file__).resolve().parents[2] / "src"


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (relative path -> source) below ``root``."""

    for relative, body in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(dedent(body), encoding="utf-8")
    return root


def run_cli(args: list[str], cwd: Path) -> subprocess.CompletedProcess[str]:
    """Run ``python -m getgive`` in a subprocess rooted at ``cwd``."""

    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env["HOME"] = str(cwd / "home")
    env.pop("GETGIVE_CONFIG", None)
    return subprocess.run(
        [sys.executable, "-m", "getgive", *args],
        cwd=cwd,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
        check=False,
    )


@pytest.fixture()
def app_tree(tmp_path: Path) -> Path:
    """A small application whose modules live in nested directories."""

    return write_tree(
        tmp_path / "app",
        {
            "main.py": """
                config = get("./config/settings.py")
                report = get("./lib/report.py")
                give(report(config))
            """,
            "config/settings.py": """
                give({"name": "demo", "scale": get("../lib/scale.py")})
            """,
            "lib/scale.py": """
                global scale_loads
                scale_loads = globals().get("scale_loads", 0) + 1
                give(10)
            """,
            "lib/report.py": """
                scale = get("scale.py")
                helpers = get("./helpers/format.py")

                def report(config):
                    return helpers(config["name"], config["scale"] * scale)

                give(report)
            """,
            "lib/helpers/format.py": """
                def render(name, value):
                    return f"{name}={value}"

                give(render)
            """,
        },
    )
