import sys
import textwrap

import pytest

from roomview.core.definitions import GeneratorPaths

# Stand-in generator: `python generator.py -p <script>`.
# The first line of the script file picks the behavior, the rest is the body.
GENERATOR_SOURCE = textwrap.dedent('''
    import sys
    import time

    args = sys.argv[1:]
    if len(args) != 2 or args[0] != "-p":
        sys.stderr.write("usage: generator -p <script>\\n")
        sys.exit(2)

    with open(args[1], encoding="utf-8") as f:
        mode, _, body = f.read().partition("\\n")
    mode = mode.strip()

    if mode == "ok":
        sys.stdout.write(body)
    elif mode == "fail":
        sys.stderr.write(body)
        sys.exit(3)
    elif mode == "sleep":
        time.sleep(float(body or 30))
        sys.stdout.write("{}")
    elif mode == "badutf8":
        sys.stdout.flush()
        sys.stdout.buffer.write(b"\\xff\\xfe{}")
    else:
        sys.stderr.write("unknown mode " + mode + "\\n")
        sys.exit(4)
''')

ROOM1_JSON = '{"room1":{"layers":{"terrain":[["#","."],[".","&"]]}}}'


@pytest.fixture
def make_generator(tmp_path):
    """Factory returning GeneratorPaths for a scripted generator run."""
    generator = tmp_path / "generator.py"
    generator.write_text(GENERATOR_SOURCE, encoding="utf-8")

    def _make(mode: str, body: str = "") -> GeneratorPaths:
        script = tmp_path / f"{mode}.script"
        script.write_text(f"{mode}\n{body}", encoding="utf-8")
        return GeneratorPaths(sys.executable, str(generator), str(script))

    return _make


@pytest.fixture
def room1_json():
    return ROOM1_JSON
