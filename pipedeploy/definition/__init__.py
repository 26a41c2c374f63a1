from .pipeline_definition import ObjectField, PipelineObjectSpec, ParameterSpec, PipelineDefinition

__all__ = [
    'ObjectField',
    'PipelineObjectSpec',
    'ParameterSpec',
    'PipelineDefinition',
]
