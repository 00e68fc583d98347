import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, NamedTuple

from svgakit.kernel.errors import DependencyUnavailable

if TYPE_CHECKING:
    from google.protobuf.descriptor_pb2 import DescriptorProto
    from google.protobuf.descriptor_pool import DescriptorPool


class FieldSpec(NamedTuple):
    number: int
    kind: str
    repeated: bool = False
    oneof: str | None = None
    packed: bool | None = None


class MapSpec(NamedTuple):
    number: int
    key: str
    value: str


def _entry_name(field_name: str) -> str:
    return ''.join(part.capitalize() for part in field_name.split('_')) + 'Entry'


def _require_protobuf() -> Any:
    try:
        from google import protobuf
        from google.protobuf import (  # noqa: F401
            descriptor_pb2,
            descriptor_pool,
            message,
            message_factory,
        )
    except ImportError as exc:
        raise DependencyUnavailable('protobuf') from exc
    return protobuf


class SchemaRegistry:
    """Lazily binds a declarative message schema to the protobuf runtime.

    Messages are declared as ``path -> {field name -> spec}``, where nested
    messages and enums use dotted paths (``'ShapeStyle.RGBAColor'``) and
    parents appear before their children. Lowercase kinds are scalar wire
    types, everything else names a declared message or enum.

    The descriptor pool is built on first use and shared by every caller.
    """

    __slots__ = (
        'filename',
        'package',
        'messages',
        'enums',
        '_lock',
        '_pool',
        '_classes',
    )

    def __init__(
        self,
        package: str,
        messages: Mapping[str, Mapping[str, Any]],
        enums: Mapping[str, Mapping[str, int]],
        filename: str = 'svga.proto',
    ) -> None:
        self.filename = filename
        self.package = package
        self.messages = messages
        self.enums = enums
        self._lock = threading.Lock()
        self._pool: 'DescriptorPool | None' = None
        self._classes: dict[str, type] = {}

    @property
    def loaded(self) -> bool:
        return self._pool is not None

    def load(self) -> 'DescriptorPool':
        if self._pool is None:
            with self._lock:
                if self._pool is None:
                    self._pool = self._build()
        return self._pool

    def message(self, name: str) -> type:
        cls = self._classes.get(name)
        if cls is None:
            protobuf = _require_protobuf()
            pool = self.load()
            descriptor = pool.FindMessageTypeByName(f'{self.package}.{name}')
            cls = protobuf.message_factory.GetMessageClass(descriptor)
            self._classes[name] = cls
        return cls

    @property
    def decode_error(self) -> type[Exception]:
        return _require_protobuf().message.DecodeError

    @property
    def encode_error(self) -> type[Exception]:
        return _require_protobuf().message.EncodeError

    def _build(self) -> 'DescriptorPool':
        protobuf = _require_protobuf()
        fdp = protobuf.descriptor_pb2.FileDescriptorProto(
            name=self.filename,
            package=self.package,
            syntax='proto3',
        )

        declared: 'dict[str, DescriptorProto]' = {}
        for path in self.messages:
            parent, _, name = path.rpartition('.')
            container = declared[parent].nested_type if parent else fdp.message_type
            declared[path] = container.add(name=name)

        for path, values in self.enums.items():
            parent, _, name = path.rpartition('.')
            container = declared[parent].enum_type if parent else fdp.enum_type
            enum = container.add(name=name)
            for value_name, number in values.items():
                enum.value.add(name=value_name, number=number)

        for path, fields in self.messages.items():
            for name, spec in fields.items():
                self._add_field(declared[path], path, name, spec)

        pool = protobuf.descriptor_pool.DescriptorPool()
        pool.AddSerializedFile(fdp.SerializeToString())
        return pool

    def _add_field(
        self,
        msg: 'DescriptorProto',
        path: str,
        name: str,
        spec: Any,
    ) -> None:
        fdproto = _require_protobuf().descriptor_pb2.FieldDescriptorProto

        if isinstance(spec, MapSpec):
            entry = msg.nested_type.add(name=_entry_name(name))
            entry.options.map_entry = True
            entry_path = f'{path}.{entry.name}'
            self._add_field(entry, entry_path, 'key', FieldSpec(1, spec.key))
            self._add_field(entry, entry_path, 'value', FieldSpec(2, spec.value))
            msg.field.add(
                name=name,
                number=spec.number,
                label=fdproto.LABEL_REPEATED,
                type=fdproto.TYPE_MESSAGE,
                type_name=f'.{self.package}.{entry_path}',
            )
            return

        field = msg.field.add(
            name=name,
            number=spec.number,
            label=fdproto.LABEL_REPEATED if spec.repeated else fdproto.LABEL_OPTIONAL,
        )
        if spec.kind.islower():
            field.type = getattr(fdproto, f'TYPE_{spec.kind.upper()}')
        else:
            field.type = (
                fdproto.TYPE_ENUM if spec.kind in self.enums else fdproto.TYPE_MESSAGE
            )
            field.type_name = f'.{self.package}.{spec.kind}'
        if spec.packed is not None:
            field.options.packed = spec.packed
        if spec.oneof:
            names = [decl.name for decl in msg.oneof_decl]
            if spec.oneof not in names:
                msg.oneof_decl.add(name=spec.oneof)
                names.append(spec.oneof)
            field.oneof_index = names.index(spec.oneof)
