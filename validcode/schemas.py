from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(str, Enum):
    python = 'python'
    java = 'java'
    cpp = 'cpp'
    c = 'c'


MAIN_FILE_NAMES = {
    Language.python: 'Main.py',
    Language.java: 'Main.java',
    Language.cpp: 'Main.cpp',
    Language.c: 'Main.c',
}


def main_file_name(language: Language) -> str:
    return MAIN_FILE_NAMES[Language(language)]


class SourceFile(BaseModel):
    model_config = ConfigDict(frozen=True, extra='allow')

    name: str
    content: str


class ExecutionRequest(BaseModel):
    """Body of a single executor call. Unknown keys pass through untouched."""

    model_config = ConfigDict(frozen=True, extra='allow')

    language: Language
    files: List[SourceFile]
    stdin: str = ''

    @field_validator('files')
    @classmethod
    def _files_unique_and_present(cls, files):
        if not files:
            raise ValueError('at least one source file is required')
        names = [f.name for f in files]
        if len(set(names)) != len(names):
            raise ValueError('source file names must be unique')
        return files


class RunPayload(BaseModel):
    model_config = ConfigDict(extra='allow')

    properties: ExecutionRequest


class TestCase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: Union[int, float, str]
    input: str = ''
    expected_output: str = Field('', alias='expectedOutput')
    input_file_name: Optional[str] = Field(None, alias='inputFileName')
    output_file_name: Optional[str] = Field(None, alias='outputFileName')


class Program(BaseModel):
    """Source shared by every case of a verification run.

    Callers may send ``files`` or, like the single-file editor does, bare
    ``code`` which is wrapped in the language's conventional main file.
    """

    model_config = ConfigDict(frozen=True)

    language: Language
    files: List[SourceFile] = Field(default_factory=list)
    code: Optional[str] = None

    @field_validator('files')
    @classmethod
    def _files_unique(cls, files):
        names = [f.name for f in files]
        if len(set(names)) != len(names):
            raise ValueError('source file names must be unique')
        return files

    def source_files(self) -> List[SourceFile]:
        if self.files:
            return list(self.files)
        if self.code is not None:
            return [SourceFile(name=main_file_name(self.language), content=self.code)]
        return []

    def is_blank(self) -> bool:
        return all(not f.content.strip() for f in self.source_files())


class VerifyPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    properties: Program
    test_cases: List[TestCase] = Field(default_factory=list, alias='testCases')
    # input/output .txt files, paired into test cases when testCases is empty
    uploads: List[SourceFile] = Field(default_factory=list)
    method: str = 'manual'

    @field_validator('method')
    @classmethod
    def _known_method(cls, value):
        if value not in ('manual', 'upload'):
            raise ValueError("method must be 'manual' or 'upload'")
        return value


class VerificationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, float, str]
    input: str
    expected_output: str = Field(alias='expectedOutput')
    actual_output: str = Field(alias='actualOutput')
    passed: bool
    execution_time: Union[float, int, str] = Field('NA', alias='executionTime')
    errored: bool = False
    input_file_name: Optional[str] = Field(None, alias='inputFileName')
    output_file_name: Optional[str] = Field(None, alias='outputFileName')


class RunSummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    passed_count: int = Field(alias='passedCount')
    total_count: int = Field(alias='totalCount')
    success_rate_percent: int = Field(alias='successRatePercent')


class VerificationResponse(BaseModel):
    results: List[VerificationResult]
    summary: RunSummary
    state: str
