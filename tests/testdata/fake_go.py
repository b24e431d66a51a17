#!/usr/bin/env python3
"""Stand-in for ``go test`` with coverage flags

Writes a profile covering every non-test ``*.go`` file in the working
directory. A file named ``FAIL`` makes the tests fail, ``NOPROFILE``
skips writing the profile. Each invocation is appended as a JSON line to
``$FAKE_GO_LOG`` when set.
"""

import json
import os
import pathlib
import sys


def main(argv: list[str]) -> int:
    if argv[:1] != ["test"]:
        print(f"unsupported command {argv!r}", file=sys.stderr)
        return 2
    opts: dict[str, str] = {}
    short = False
    for arg in argv[1:]:
        if arg == "-short":
            short = True
        elif arg.startswith("-") and "=" in arg:
            key, _, value = arg[1:].partition("=")
            opts[key] = value

    cwd = pathlib.Path.cwd()
    log_filename = os.environ.get("FAKE_GO_LOG")
    if log_filename:
        with open(log_filename, "a", encoding="utf-8") as f:
            f.write(json.dumps({"cwd": str(cwd), "args": argv, "short": short}))
            f.write("\n")

    if (cwd / "FAIL").exists():
        print("--- FAIL: TestSomething (0.00s)")
        print("    thing_test.go:12: expected 1, got 2", file=sys.stderr)
        print("FAIL")
        return 1

    print(f"ok  \texample.com/tree/{cwd.name}\t0.001s\tcoverage: 100.0% of statements")
    if (cwd / "NOPROFILE").exists():
        return 0

    lines = [f"mode: {opts['covermode']}\n"]
    for source in sorted(cwd.glob("*.go")):
        if source.name.endswith("_test.go"):
            continue
        lines.append(f"example.com/tree/{cwd.name}/{source.name}:3.24,5.2 1 1\n")
    outdir = pathlib.Path(opts["outputdir"])
    outdir.joinpath(opts["coverprofile"]).write_text("".join(lines), encoding="utf-8")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
