import json
import struct

import pytest


def pack_floats(*values) -> bytes:
    return struct.pack(f"<{len(values)}f", *values)


def unpack_floats(data: bytes):
    return struct.unpack(f"<{len(data) // 4}f", data)


def normal_gltf(count=1, component_type=5126, accessor_type="VEC3", byte_stride=None,
                view_offset=0, accessor_offset=0, uri="model.bin"):
    """Jeden mesh s jedním primitivem a jedním NORMAL accessorem."""
    buffer_view = {"buffer": 0, "byteOffset": view_offset, "byteLength": 12 * count}
    if byte_stride is not None:
        buffer_view["byteStride"] = byte_stride

    return {
        "asset": {"version": "2.0"},
        "buffers": [{"uri": uri, "byteLength": 0}],
        "bufferViews": [buffer_view],
        "accessors": [{
            "bufferView": 0,
            "byteOffset": accessor_offset,
            "componentType": component_type,
            "count": count,
            "type": accessor_type,
        }],
        "meshes": [{"primitives": [{"attributes": {"NORMAL": 0}}]}],
    }


@pytest.fixture
def write_asset(tmp_path):
    """Zapíše GLTF a jeho .bin do tmp_path a vrátí cestu ke GLTF souboru."""

    def write(gltf, data: bytes, name="model.gltf"):
        for buffer in gltf.get("buffers", []):
            if "byteLength" in buffer:
                buffer["byteLength"] = len(data)
        gltf_path = tmp_path / name
        gltf_path.write_text(json.dumps(gltf), encoding="utf-8")

        uri = gltf.get("buffers", [{}])[0].get("uri") if gltf.get("buffers") else None
        if uri and not uri.startswith("data:"):
            (tmp_path / uri).write_bytes(data)
        return gltf_path

    return write
