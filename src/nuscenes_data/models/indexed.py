"""
Records augmented by the indexer with relations the raw tables do not carry
"""
from typing import Iterable, Tuple

from .records import InstanceModel, SampleModel, SceneModel
from .token import Token


class IndexedScene(SceneModel):
    sample_tokens: Tuple[Token, ...] = ()  # chain order

    @classmethod
    def from_raw(cls, scene: SceneModel, sample_tokens: Iterable[Token]) -> "IndexedScene":
        return cls.model_construct(**dict(scene), sample_tokens=tuple(sample_tokens))


class IndexedInstance(InstanceModel):
    annotation_tokens: Tuple[Token, ...] = ()  # chain order

    @classmethod
    def from_raw(
        cls, instance: InstanceModel, annotation_tokens: Iterable[Token]
    ) -> "IndexedInstance":
        return cls.model_construct(**dict(instance), annotation_tokens=tuple(annotation_tokens))


class IndexedSample(SampleModel):
    annotation_tokens: Tuple[Token, ...] = ()
    sample_data_tokens: Tuple[Token, ...] = ()

    @classmethod
    def from_raw(
        cls,
        sample: SampleModel,
        annotation_tokens: Iterable[Token],
        sample_data_tokens: Iterable[Token],
    ) -> "IndexedSample":
        return cls.model_construct(
            **dict(sample),
            annotation_tokens=tuple(annotation_tokens),
            sample_data_tokens=tuple(sample_data_tokens),
        )
