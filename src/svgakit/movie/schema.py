from svgakit.kernel.registry import FieldSpec, MapSpec

PACKAGE = 'com.opensource.svga'
ROOT = 'MovieEntity'

# parents must be declared before nested messages
MESSAGES: dict[str, dict[str, FieldSpec | MapSpec]] = {
    'Layout': {
        'x': FieldSpec(1, 'float'),
        'y': FieldSpec(2, 'float'),
        'width': FieldSpec(3, 'float'),
        'height': FieldSpec(4, 'float'),
    },
    'Transform': {
        'a': FieldSpec(1, 'float'),
        'b': FieldSpec(2, 'float'),
        'c': FieldSpec(3, 'float'),
        'd': FieldSpec(4, 'float'),
        'tx': FieldSpec(5, 'float'),
        'ty': FieldSpec(6, 'float'),
    },
    'ShapeArgs': {
        'd': FieldSpec(1, 'string'),
    },
    'RectArgs': {
        'x': FieldSpec(1, 'float'),
        'y': FieldSpec(2, 'float'),
        'width': FieldSpec(3, 'float'),
        'height': FieldSpec(4, 'float'),
        'corner_radius': FieldSpec(5, 'float'),
    },
    'EllipseArgs': {
        'x': FieldSpec(1, 'float'),
        'y': FieldSpec(2, 'float'),
        'radius_x': FieldSpec(3, 'float'),
        'radius_y': FieldSpec(4, 'float'),
    },
    'ShapeStyle': {
        'fill': FieldSpec(1, 'ShapeStyle.RGBAColor'),
        'stroke': FieldSpec(2, 'ShapeStyle.RGBAColor'),
        'stroke_width': FieldSpec(3, 'float'),
        'line_cap': FieldSpec(4, 'ShapeStyle.LineCap'),
        'line_join': FieldSpec(5, 'ShapeStyle.LineJoin'),
        'miter_limit': FieldSpec(6, 'float'),
        # native players cannot read packed repeated primitives
        'line_dash': FieldSpec(7, 'float', repeated=True, packed=False),
    },
    'ShapeStyle.RGBAColor': {
        'r': FieldSpec(1, 'float'),
        'g': FieldSpec(2, 'float'),
        'b': FieldSpec(3, 'float'),
        'a': FieldSpec(4, 'float'),
    },
    'ShapeEntity': {
        'type': FieldSpec(1, 'ShapeEntity.ShapeType'),
        'shape': FieldSpec(2, 'ShapeArgs', oneof='args'),
        'rect': FieldSpec(3, 'RectArgs', oneof='args'),
        'ellipse': FieldSpec(4, 'EllipseArgs', oneof='args'),
        'styles': FieldSpec(10, 'ShapeStyle'),
        'transform': FieldSpec(11, 'Transform'),
    },
    'FrameEntity': {
        'alpha': FieldSpec(1, 'float'),
        'layout': FieldSpec(2, 'Layout'),
        'transform': FieldSpec(3, 'Transform'),
        'clip_path': FieldSpec(4, 'string'),
        'shapes': FieldSpec(5, 'ShapeEntity', repeated=True),
    },
    'SpriteEntity': {
        'image_key': FieldSpec(1, 'string'),
        'frames': FieldSpec(2, 'FrameEntity', repeated=True),
        'matte_key': FieldSpec(3, 'string'),
    },
    'AudioEntity': {
        'audio_key': FieldSpec(1, 'string'),
        'start_frame': FieldSpec(2, 'int32'),
        'end_frame': FieldSpec(3, 'int32'),
        'start_time': FieldSpec(4, 'int32'),
        'total_time': FieldSpec(5, 'int32'),
    },
    'MovieParams': {
        'view_box_width': FieldSpec(1, 'float'),
        'view_box_height': FieldSpec(2, 'float'),
        'fps': FieldSpec(3, 'int32'),
        'frames': FieldSpec(4, 'int32'),
    },
    'MovieEntity': {
        'version': FieldSpec(1, 'string'),
        'params': FieldSpec(2, 'MovieParams'),
        'images': MapSpec(3, 'string', 'bytes'),
        'sprites': FieldSpec(4, 'SpriteEntity', repeated=True),
        'audios': FieldSpec(5, 'AudioEntity', repeated=True),
    },
}

ENUMS: dict[str, dict[str, int]] = {
    'ShapeStyle.LineCap': {
        'LineCap_BUTT': 0,
        'LineCap_ROUND': 1,
        'LineCap_SQUARE': 2,
    },
    'ShapeStyle.LineJoin': {
        'LineJoin_MITER': 0,
        'LineJoin_ROUND': 1,
        'LineJoin_BEVEL': 2,
    },
    'ShapeEntity.ShapeType': {
        'SHAPE': 0,
        'RECT': 1,
        'ELLIPSE': 2,
        'KEEP': 3,
    },
}
