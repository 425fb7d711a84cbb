from dataclasses import dataclass
from pathlib import Path
import json
import logging
import sys

import numpy as np
from pygltflib import GLTF2, FLOAT, VEC3

from errors import IoError, NotFound, ParseError, SchemaViolation

DEFAULT_STRIDE = 12  # VEC3 float32 těsně za sebou
FLOAT32 = 4


@dataclass
class FlipResult:
    gltf_path: Path
    bin_path: Path
    flipped: int
    written: bool


def find_gltf(path) -> Path:
    """
    Vrátí cestu ke GLTF souboru. Pokud je zadán adresář, použije první
    soubor s příponou .gltf (podle abecedy).
    """
    path = Path(path)
    if not path.exists():
        raise NotFound(f"file not found: {path}")

    if not path.is_dir():
        return path

    candidates = sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() == ".gltf")
    if not candidates:
        raise NotFound(f"no .gltf file found in directory {path}")

    print(f"Found GLTF file: {candidates[0]}")
    return candidates[0]


def _drop_malformed(document: dict) -> dict:
    """
    Odstraní null a jinak nevalidní položky, na kterých by pygltflib spadlo.
    Vadné accessory a bufferViews se nahradí prázdným objektem a jejich
    indexy se vrátí, aby je bylo možné po načtení označit jako chybějící.
    """
    broken = {}
    for key in ("buffers", "bufferViews", "accessors", "meshes"):
        items = document.get(key)
        if not isinstance(items, list):
            document.pop(key, None)
            continue
        if key in ("bufferViews", "accessors"):
            broken[key] = [i for i, item in enumerate(items) if not isinstance(item, dict)]
        document[key] = [item if isinstance(item, dict) else {} for item in items]

    for mesh in document.get("meshes", []):
        primitives = mesh.get("primitives")
        if not isinstance(primitives, list):
            mesh["primitives"] = []
            continue
        mesh["primitives"] = [primitive for primitive in primitives if isinstance(primitive, dict)]
        for primitive in mesh["primitives"]:
            attributes = primitive.get("attributes")
            if not isinstance(attributes, dict):
                primitive["attributes"] = {}
            else:
                primitive["attributes"] = {name: value for name, value in attributes.items() if value is not None}

    return broken


def load_gltf(path: Path) -> GLTF2:
    try:
        document = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"error parsing GLTF JSON in {path}: {e}") from e
    except OSError as e:
        raise IoError(f"error reading file {path}: {e}") from e

    if not isinstance(document, dict):
        raise SchemaViolation(f"GLTF root in {path} is not a JSON object")

    broken = _drop_malformed(document)

    try:
        gltf = GLTF2.from_dict(document, infer_missing=True)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SchemaViolation(f"unexpected GLTF structure in {path}: {e}") from e

    for key, indices in broken.items():
        items = getattr(gltf, key)
        for i in indices:
            items[i] = None

    return gltf


def buffer_path(gltf: GLTF2, gltf_path: Path) -> Path:
    """Cesta k .bin souboru prvního bufferu, relativně ke GLTF souboru."""
    if not gltf.buffers:
        raise SchemaViolation("no buffers found in GLTF")

    uri = gltf.buffers[0].uri
    if not isinstance(uri, str) or not uri:
        raise SchemaViolation("no buffer URI found in GLTF")
    if uri.startswith("data:"):
        raise SchemaViolation("buffer 0 is an embedded data URI, only external .bin buffers are supported")

    return gltf_path.parent / uri


def read_buffer(bin_path: Path) -> bytearray:
    try:
        return bytearray(bin_path.read_bytes())
    except FileNotFoundError as e:
        raise NotFound(f"binary file not found: {bin_path}") from e
    except OSError as e:
        raise IoError(f"error reading binary file {bin_path}: {e}") from e


def write_buffer(bin_path: Path, data: bytearray):
    try:
        bin_path.write_bytes(data)
    except OSError as e:
        raise IoError(f"error writing binary file {bin_path}: {e}") from e


def normal_accessor_indices(gltf: GLTF2):
    """Indexy NORMAL accessorů ze všech primitiv, každý jen jednou."""
    # Sdílený accessor se otočí i započítá jednou, druhé otočení by ho vrátilo zpět
    seen = []
    for mesh in gltf.meshes:
        for primitive in mesh.primitives:
            if primitive.attributes and primitive.attributes.NORMAL is not None:
                if primitive.attributes.NORMAL not in seen:
                    seen.append(primitive.attributes.NORMAL)
    return seen


def _is_count(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_index(value, items) -> bool:
    return _is_count(value) and value < len(items) and items[value] is not None


def flip_accessor_normals(gltf: GLTF2, accessor_index: int, data: bytearray) -> int:
    """
    Otočí (znegují) normály jednoho NORMAL accessoru přímo v bufferu.

    Nepodporovaný nebo neúplný accessor se přeskočí s varováním, stejně tak
    jednotlivé složky, které leží mimo buffer.

    :param gltf: načtený GLTF dokument.
    :param accessor_index: index accessoru z primitive.attributes.NORMAL.
    :param data: obsah .bin souboru, mění se na místě.
    :return: počet otočených normál.
    """
    if not _is_index(accessor_index, gltf.accessors):
        logging.warning("NORMAL accessor %s does not exist, skipping", accessor_index)
        return 0
    accessor = gltf.accessors[accessor_index]

    if accessor.type != VEC3 or accessor.componentType != FLOAT:
        logging.warning(
            "NORMAL accessor %d is not VEC3 float (type=%s, componentType=%s), skipping",
            accessor_index, accessor.type, accessor.componentType,
        )
        return 0

    count = accessor.count
    if not _is_count(count):
        logging.warning("NORMAL accessor %d has no valid count, skipping", accessor_index)
        return 0

    if not _is_index(accessor.bufferView, gltf.bufferViews):
        logging.warning("NORMAL accessor %d references missing bufferView %s, skipping", accessor_index, accessor.bufferView)
        return 0
    buffer_view = gltf.bufferViews[accessor.bufferView]

    view_offset = buffer_view.byteOffset or 0
    accessor_offset = accessor.byteOffset or 0
    stride = buffer_view.byteStride or DEFAULT_STRIDE
    if not (_is_count(view_offset) and _is_count(accessor_offset) and _is_count(stride)):
        logging.warning("NORMAL accessor %d has invalid byteOffset or byteStride, skipping", accessor_index)
        return 0
    start = view_offset + accessor_offset

    # Normály od indexu `fit` začínají až za koncem bufferu
    fit = max(0, min(count, (len(data) - start) // stride + 1))
    if fit < count:
        logging.warning(
            "buffer overflow at normals %d..%d of accessor %d, skipping %d normals",
            fit, count - 1, accessor_index, count - fit,
        )

    # Absolutní offset každé složky (x, y, z) každé normály, tvar (fit, 3)
    offsets = start + np.arange(fit)[:, None] * stride + np.arange(3) * FLOAT32
    in_range = offsets + FLOAT32 <= len(data)

    for i, j in np.argwhere(~in_range):
        logging.warning("buffer overflow at normal %d, component %d", i, j)

    if not in_range.any():
        return 0

    # Při byteStride < 12 se složky překrývají, každý float se otočí jen jednou
    float_offsets = np.unique(offsets[in_range])

    raw = np.frombuffer(data, dtype=np.uint8)
    byte_index = float_offsets[:, None] + np.arange(FLOAT32)

    values = raw[byte_index].view("<f4")
    np.negative(values, out=values)
    raw[byte_index] = values.view(np.uint8)

    return int(in_range.any(axis=1).sum())


def flip_normals(path) -> FlipResult:
    gltf_path = find_gltf(path)

    # Načtení GLTF souboru
    gltf = load_gltf(gltf_path)

    bin_path = buffer_path(gltf, gltf_path)
    data = read_buffer(bin_path)

    normals = normal_accessor_indices(gltf)
    if normals and not gltf.accessors:
        raise SchemaViolation("no accessors found in GLTF")
    if normals and not gltf.bufferViews:
        raise SchemaViolation("no bufferViews found in GLTF")

    flipped = 0
    for accessor_index in normals:
        flipped += flip_accessor_normals(gltf, accessor_index, data)

    if flipped == 0:
        print(f"No normals found to flip in {gltf_path}")
        return FlipResult(gltf_path, bin_path, 0, False)

    write_buffer(bin_path, data)
    print(f"Flipped {flipped} normal vectors in {bin_path}")

    return FlipResult(gltf_path, bin_path, flipped, True)


if __name__ == "__main__":

    if len(sys.argv) < 2:
        print("Usage: python attributes.py <path/to/file.gltf>")
    else:
        flip_normals(sys.argv[1])
