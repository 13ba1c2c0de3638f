from typing import Annotated

from fastapi import Depends, Request

from sqlpatch.core.registry import QueryRegistry
from sqlpatch.engines.executor import PatchGenerator


def get_registry(request: Request) -> QueryRegistry:
    return request.app.state.registry


def get_generator(request: Request) -> PatchGenerator:
    return request.app.state.generator


RegistryDep = Annotated[QueryRegistry, Depends(get_registry)]
GeneratorDep = Annotated[PatchGenerator, Depends(get_generator)]
