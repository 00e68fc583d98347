from dataclasses import dataclass

from svgakit.kernel.preset import Preset
from svgakit.kernel.registry import SchemaRegistry
from svgakit.movie import tree
from svgakit.movie.decode import decode, parse
from svgakit.movie.encode import encode, sanitize_document, to_message
from svgakit.movie.layers import apply_layers, export
from svgakit.movie.schema import ENUMS, MESSAGES, PACKAGE, ROOT
from svgakit.movie.synth import add_layer, compose_layer


@dataclass(frozen=True)
class Codec(Preset):
    parse = parse
    decode = decode
    sanitize = sanitize_document
    to_message = to_message
    encode = encode
    compose_layer = compose_layer
    add_layer = add_layer
    apply_layers = apply_layers
    export = export

    # static pass through
    find = staticmethod(tree.find)
    findall = staticmethod(tree.findall)
    render = staticmethod(tree.render)
    renders = staticmethod(tree.renders)


svga = Codec(registry=SchemaRegistry(PACKAGE, MESSAGES, ENUMS), root=ROOT)
