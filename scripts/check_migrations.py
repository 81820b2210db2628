"""CI guard for the site user store schema.

Fails when the migration history has more than one head or when the ORM
models have drifted from the latest migration.
"""
import argparse
import subprocess
import sys
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

PROJECT_DIR = Path(__file__).resolve().parents[1]


def load_config() -> Config:
    cfg = Config(str(PROJECT_DIR / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_DIR / "alembic"))
    return cfg


def migration_heads(cfg: Config) -> list[str]:
    return list(ScriptDirectory.from_config(cfg).get_heads())


def check_single_head(cfg: Config) -> int:
    heads = migration_heads(cfg)
    if len(heads) != 1:
        print(f"[FAIL] Alembic heads={len(heads)} -> {heads}")
        return 1
    print(f"[OK] Alembic single head: {heads[0]}")
    return 0


def check_drift() -> int:
    proc = subprocess.run(
        [sys.executable, "-m", "alembic", "check"],
        cwd=str(PROJECT_DIR),
        capture_output=True,
        text=True,
    )
    if proc.stdout:
        print(proc.stdout.strip())
    if proc.stderr:
        print(proc.stderr.strip(), file=sys.stderr)
    if proc.returncode != 0:
        print("[FAIL] Models differ from the latest migration.", file=sys.stderr)
        return proc.returncode
    print("[OK] No schema drift.")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--skip-drift", action="store_true", help="only check the head count")
    args = parser.parse_args(argv)

    status = check_single_head(load_config())
    if status or args.skip_drift:
        return status
    return check_drift()


if __name__ == "__main__":
    raise SystemExit(main())
