from pathlib import Path

import numpy as np


def read_file(path: str | Path) -> bytes:
    if not Path(path).stat().st_size:
        # mmap refuses empty files
        return b''
    return np.memmap(path, dtype='u1', mode='r').tobytes()


def write_file(path: str | Path, data: bytes) -> int:
    with Path(path).open('wb') as res:
        return res.write(data)
