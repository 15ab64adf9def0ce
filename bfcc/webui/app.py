from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response, status
from pydantic import BaseModel, Field, field_validator

from bfcc.bf_interpreter import ExecutionState, IRInterpreter, StepLimitExceeded
from bfcc.config import CompilerConfig
from bfcc.ir import node_to_dict
from bfcc.optimizer import DEFAULT_PASSES, PASSES, UnknownPassError, resolve_passes

from .session import CompilationRecord, CompilationStore


def _string_to_input_bytes(data: str) -> List[int]:
    return [ord(ch) for ch in data]


def _state_to_dict(state: ExecutionState) -> dict:
    return {
        "step": state.step,
        "pc": state.pc,
        "node": state.node,
        "pointer": state.pointer,
        "tape_start": state.tape_start,
        "tape": list(state.tape),
        "output": state.output,
        "program_length": state.program_length,
    }


class CompileRequest(BaseModel):
    code: str = ""
    optimize: bool = True
    passes: List[str] = Field(default_factory=lambda: list(DEFAULT_PASSES))
    memory_size: int = Field(default=30000, ge=1)

    @field_validator("passes")
    @classmethod
    def validate_passes(cls, value: List[str]) -> List[str]:
        try:
            resolve_passes(value)
        except UnknownPassError as exc:
            raise ValueError(str(exc)) from exc
        return value


class IRNodeModel(BaseModel):
    kind: str
    count: Optional[int] = None
    value: Optional[int] = None
    offset: Optional[int] = None


class CompilationPayload(BaseModel):
    compilation_id: str
    source: str
    passes: List[str]
    memory_size: int
    ir: List[IRNodeModel]
    node_count: int
    c_code: str


class RunRequest(BaseModel):
    input: str = ""
    max_steps: Optional[int] = Field(default=None, ge=1)
    tape_window: int = Field(default=10, ge=0)


class ExecutionStateModel(BaseModel):
    step: int
    pc: int
    node: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: str
    program_length: int


class RunResponse(BaseModel):
    compilation_id: str
    output: str
    steps: int
    state: ExecutionStateModel


class PassListing(BaseModel):
    available: List[str]
    default: List[str]


def create_app(store: Optional[CompilationStore] = None) -> FastAPI:
    compilation_store = store if store is not None else CompilationStore()
    app = FastAPI(title="bfcc compiler API", version="0.1.0")

    def _get_record(compilation_id: str) -> CompilationRecord:
        try:
            return compilation_store.get(compilation_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    def _build_payload(record: CompilationRecord) -> CompilationPayload:
        compilation = record.compilation
        return CompilationPayload(
            compilation_id=record.compilation_id,
            source=compilation.source,
            passes=list(compilation.passes),
            memory_size=record.config.memory_size,
            ir=[IRNodeModel(**node_to_dict(node)) for node in compilation.program],
            node_count=len(compilation.program),
            c_code=compilation.code,
        )

    @app.get("/api/passes", response_model=PassListing)
    def list_passes() -> PassListing:
        return PassListing(available=list(PASSES), default=list(DEFAULT_PASSES))

    @app.post("/api/compile", response_model=CompilationPayload, status_code=status.HTTP_201_CREATED)
    def create_compilation(payload: CompileRequest) -> CompilationPayload:
        config = CompilerConfig(
            memory_size=payload.memory_size,
            passes=tuple(payload.passes),
            optimize=payload.optimize,
        )
        record = compilation_store.create(source=payload.code, config=config)
        return _build_payload(record)

    @app.get("/api/compile/{compilation_id}", response_model=CompilationPayload)
    def get_compilation(compilation_id: str) -> CompilationPayload:
        return _build_payload(_get_record(compilation_id))

    @app.post("/api/compile/{compilation_id}/run", response_model=RunResponse)
    def run_compilation(compilation_id: str, payload: RunRequest) -> RunResponse:
        record = _get_record(compilation_id)
        interpreter = IRInterpreter(tape_length=record.config.memory_size)
        try:
            last_state = interpreter.final_state(
                record.compilation.program,
                input_data=_string_to_input_bytes(payload.input),
                max_steps=payload.max_steps,
                tape_window=payload.tape_window,
            )
        except StepLimitExceeded as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except (IndexError, ValueError) as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            ) from exc

        return RunResponse(
            compilation_id=record.compilation_id,
            output=last_state.output,
            steps=last_state.step,
            state=ExecutionStateModel(**_state_to_dict(last_state)),
        )

    @app.delete("/api/compile/{compilation_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_compilation(compilation_id: str) -> Response:
        removed = compilation_store.remove(compilation_id)
        if not removed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown compilation id: {compilation_id}",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]
