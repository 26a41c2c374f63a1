"""
In-memory model of a pipeline definition file.

The file follows the pipeline definition JSON layout:

    {
        "objects": [{"id": "Default", "name": "Default", "schedule": {"ref": "Daily"}}, ...],
        "parameters": [{"id": "myInput", "type": "AWS::S3::ObjectKey"}],
        "values": {"myInput": "s3://bucket/input/"}
    }

Only "objects" is required.
"""
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.exceptions import MalformedDefinition


@dataclass(frozen=True)
class ObjectField:
    """One key of a pipeline object, holding either a string or a reference"""
    key: str
    string_value: Optional[str] = None
    ref_value: Optional[str] = None

    @property
    def is_ref(self) -> bool:
        return self.ref_value is not None

    def to_remote(self) -> Dict[str, str]:
        if self.is_ref:
            return {'key': self.key, 'refValue': self.ref_value}
        return {'key': self.key, 'stringValue': self.string_value}


@dataclass(frozen=True)
class PipelineObjectSpec:
    """A node of the pipeline graph"""
    id: str
    name: str
    fields: Tuple[ObjectField, ...] = field(default_factory=tuple)

    def get(self, key: str) -> Optional[ObjectField]:
        for object_field in self.fields:
            if object_field.key == key:
                return object_field
        return None

    def to_remote(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'fields': [object_field.to_remote() for object_field in self.fields],
        }


@dataclass(frozen=True)
class ParameterSpec:
    """A declared pipeline parameter and its attributes"""
    id: str
    attributes: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def to_remote(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'attributes': [{'key': key, 'stringValue': value} for key, value in self.attributes],
        }


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _parse_fields(key: str, value: Any) -> List[ObjectField]:
    """Turn one JSON key/value pair into remote fields"""
    if isinstance(value, list):
        parsed = []
        for item in value:
            parsed.extend(_parse_fields(key, item))
        return parsed
    if isinstance(value, dict):
        if set(value.keys()) != {'ref'}:
            raise MalformedDefinition(f"field '{key}' must be a string, a list or a {{\"ref\": ...}} object")
        return [ObjectField(key=key, ref_value=_to_string(value['ref']))]
    if value is None:
        raise MalformedDefinition(f"field '{key}' has no value")
    return [ObjectField(key=key, string_value=_to_string(value))]


class PipelineDefinition:
    """
    Parsed pipeline definition: an ordered, immutable list of objects with
    unique identifiers, plus optional parameters and parameter values.
    """

    def __init__(self, objects: List[PipelineObjectSpec],
                 parameters: Optional[List[ParameterSpec]] = None,
                 values: Optional[List[Tuple[str, str]]] = None,
                 source: Optional[str] = None):
        seen = set()
        for pipeline_object in objects:
            if pipeline_object.id in seen:
                raise MalformedDefinition(f"duplicate object id '{pipeline_object.id}'", source)
            seen.add(pipeline_object.id)

        self._objects = tuple(objects)
        self._parameters = tuple(parameters or ())
        self._values = tuple(values or ())
        self.source = source

    @classmethod
    def from_dict(cls, data: Any, source: Optional[str] = None) -> 'PipelineDefinition':
        """Build a definition from already-decoded JSON"""
        if not isinstance(data, dict) or not isinstance(data.get('objects'), list):
            raise MalformedDefinition("no 'objects' list found", source)

        objects = []
        for index, raw in enumerate(data['objects']):
            if not isinstance(raw, dict):
                raise MalformedDefinition(f"object #{index} is not a JSON object", source)
            object_id = raw.get('id')
            if not object_id or not isinstance(object_id, str):
                raise MalformedDefinition(f"object #{index} has no 'id'", source)

            fields = []
            try:
                for key, value in raw.items():
                    if key in ('id', 'name'):
                        continue
                    fields.extend(_parse_fields(key, value))
            except MalformedDefinition as e:
                raise MalformedDefinition(f"object '{object_id}': {e.message}", source) from e

            objects.append(PipelineObjectSpec(
                id=object_id,
                name=_to_string(raw.get('name') or object_id),
                fields=tuple(fields),
            ))

        parameters = []
        for index, raw in enumerate(data.get('parameters') or []):
            if not isinstance(raw, dict) or not raw.get('id'):
                raise MalformedDefinition(f"parameter #{index} has no 'id'", source)
            attributes = tuple(
                (key, _to_string(value)) for key, value in raw.items() if key != 'id'
            )
            parameters.append(ParameterSpec(id=raw['id'], attributes=attributes))

        values = []
        raw_values = data.get('values') or {}
        if not isinstance(raw_values, dict):
            raise MalformedDefinition("'values' must be a JSON object", source)
        for key, value in raw_values.items():
            for item in (value if isinstance(value, list) else [value]):
                values.append((key, _to_string(item)))

        return cls(objects, parameters, values, source=source)

    @classmethod
    def from_json(cls, text: str, source: Optional[str] = None) -> 'PipelineDefinition':
        try:
            data = json.loads(text)
        except ValueError as e:
            raise MalformedDefinition("invalid JSON", source, cause=e) from e
        return cls.from_dict(data, source=source)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'PipelineDefinition':
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            raise MalformedDefinition("cannot read file", path.name, cause=e) from e
        return cls.from_json(text, source=path.name)

    @property
    def objects(self) -> Tuple[PipelineObjectSpec, ...]:
        return self._objects

    @property
    def parameters(self) -> Tuple[ParameterSpec, ...]:
        return self._parameters

    @property
    def values(self) -> Tuple[Tuple[str, str], ...]:
        return self._values

    def get_object(self, object_id: str) -> Optional[PipelineObjectSpec]:
        for pipeline_object in self._objects:
            if pipeline_object.id == object_id:
                return pipeline_object
        return None

    def to_remote_objects(self) -> List[Dict[str, Any]]:
        """Objects in the order and shape expected by validate/put calls"""
        return [pipeline_object.to_remote() for pipeline_object in self._objects]

    def to_remote_parameters(self) -> List[Dict[str, Any]]:
        return [parameter.to_remote() for parameter in self._parameters]

    def to_remote_values(self) -> List[Dict[str, str]]:
        return [{'id': key, 'stringValue': value} for key, value in self._values]

    def __len__(self) -> int:
        return len(self._objects)
