"""Archive builders and a fake HTTP layer shared by the tests."""

import io
import tarfile
import zipfile
from typing import Dict, List, Optional, Union

import requests

FileMap = Dict[str, Union[bytes, str]]


def _as_bytes(data: Union[bytes, str]) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data


def build_tar_gz(files: FileMap, mode: int = 0o755) -> bytes:
    """Build a gzipped tarball in memory from a {member name: content} map."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tf:
        for name, content in files.items():
            data = _as_bytes(content)
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            tf.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_zip(files: FileMap) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in files.items():
            zf.writestr(name, _as_bytes(content))
    return buffer.getvalue()


def node_files(version: str, suffix: str = "linux-x64") -> FileMap:
    root = f"node-v{version}-{suffix}"
    return {
        f"{root}/bin/node": "#!/bin/sh\necho node\n",
        f"{root}/bin/npm": "#!/bin/sh\necho npm\n",
        f"{root}/README.md": "node",
    }


def go_files() -> FileMap:
    return {
        "go/bin/go": "#!/bin/sh\necho go\n",
        "go/bin/gofmt": "#!/bin/sh\necho gofmt\n",
        "go/VERSION": "go",
    }


def python_files(version: str, suffix: str = "x86_64") -> FileMap:
    return {
        f"Python-{version}-{suffix}/bin/python": "#!/bin/sh\necho python\n",
        f"Python-{version}-{suffix}/README": "python",
    }


RUST_INSTALL_SCRIPT = """#!/bin/sh
prefix=""
while [ $# -gt 0 ]; do
    case "$1" in
        --prefix) prefix="$2"; shift 2 ;;
        *) shift ;;
    esac
done
mkdir -p "$prefix/bin"
printf '#!/bin/sh\\necho rustc\\n' > "$prefix/bin/rustc"
printf '#!/bin/sh\\necho cargo\\n' > "$prefix/bin/cargo"
"""


def rust_files(version: str, suffix: str = "x86_64-unknown-linux-gnu", script: Optional[str] = RUST_INSTALL_SCRIPT) -> FileMap:
    root = f"rust-{version}-{suffix}"
    files: FileMap = {
        f"{root}/rustc/bin/rustc": "#!/bin/sh\necho rustc\n",
        f"{root}/cargo/bin/cargo": "#!/bin/sh\necho cargo\n",
    }
    if script is not None:
        files[f"{root}/install.sh"] = script
    return files


class FakeResponse:
    """Minimal stand-in for a streamed requests.Response."""

    def __init__(self, content: bytes = b"", status_code: int = 200, chunk_size: int = 1024):
        self.content = content
        self.status_code = status_code
        self.headers = {"content-length": str(len(content))}
        self.closed = False
        self._chunk_size = chunk_size

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.content), self._chunk_size):
            yield self.content[start:start + self._chunk_size]

    def close(self):
        self.closed = True


class FakeServer:
    """Serves registered URLs; anything else answers 404."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.calls: List[str] = []
        self.responses: List[FakeResponse] = []
        self.error: Optional[Exception] = None

    def add(self, url: str, content: bytes) -> None:
        self.files[url] = content

    def get(self, url, stream=False, timeout=None, **kwargs):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        if url in self.files:
            response = FakeResponse(self.files[url])
        else:
            response = FakeResponse(b"not found", status_code=404)
        self.responses.append(response)
        return response


def connection_error(message: str = "connection refused") -> requests.ConnectionError:
    return requests.ConnectionError(message)
