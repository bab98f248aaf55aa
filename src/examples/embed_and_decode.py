#!/usr/bin/env python3
"""
Pack a two-color checkerboard and a gradient RGB image, emit them as an
importable Python module, then decode both from the embedded words alone.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
from PIL import Image

import bakery


def main() -> None:
    base = Path(__file__).parent
    data_dir = base / "data"
    out_dir = base / "out"
    data_dir.mkdir(parents=True, exist_ok=True)
    out_dir.mkdir(parents=True, exist_ok=True)

    # 48x32 board of 8px cells, two colors only
    yy, xx = np.mgrid[0:32, 0:48]
    board = ((yy // 8 + xx // 8) % 2).astype(bool)
    checker = np.empty((32, 48, 3), dtype=np.uint8)
    checker[board] = (20, 150, 240)
    checker[~board] = (250, 230, 200)

    # 40x24 horizontal gradient with a vertical blue ramp
    gradient = np.zeros((24, 40, 3), dtype=np.uint8)
    gradient[..., 0] = np.linspace(0, 255, 40, dtype=np.uint8)[None, :]
    gradient[..., 2] = np.linspace(255, 0, 24, dtype=np.uint8)[:, None]

    sources = {"checker": checker, "gradient": gradient}
    for name, arr in sources.items():
        Image.fromarray(arr).save(data_dir / f"{name}.png")

    # Build step: image files -> Python module holding the word tuples
    module_path = out_dir / "embedded_assets.py"
    with open(module_path, "w", encoding="utf-8") as f:
        for name in sources:
            words = bakery.pack_image_file(str(data_dir / f"{name}.png"))
            f.write(bakery.emit_python_source(name.upper(), words))

    # Load step: no file access to the images, only the imported constants
    if str(out_dir) not in sys.path:
        sys.path.insert(0, str(out_dir))
    assets = importlib.import_module("embedded_assets")
    store = bakery.PayloadStore({name: getattr(assets, name.upper()) for name in sources})

    print("=== embed_and_decode ===")
    for name in store.names():
        head = store.header(name)
        pixels = store.decode(name, bakery.pixel_dtype(head.bpp))
        arr = pixels.view(np.uint8).reshape(head.height, head.width, head.bpp)
        exact = np.array_equal(arr, sources[name])
        print(f"{name:8s} : {head.kind.name:16s} {head.width}x{head.height} bpp={head.bpp} "
              f"words={store.words(name).size} exact={exact}")
    print(f"embedded module : {module_path}")


if __name__ == "__main__":
    main()
