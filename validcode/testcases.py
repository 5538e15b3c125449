import re
from typing import Iterable, List

from .schemas import SourceFile, TestCase


_INPUT_NAME = re.compile(r'(.*)input(.*)\.txt$')


def pair_uploaded_files(files: Iterable[SourceFile]) -> List[TestCase]:
    """Build test cases from ``<prefix>input<suffix>.txt`` / ``<prefix>output<suffix>.txt`` pairs.

    Inputs without a matching output file are skipped.
    """
    files = list(files)
    outputs = {f.name: f for f in files if 'output' in f.name}

    cases = []
    for f in files:
        if 'input' not in f.name:
            continue
        match = _INPUT_NAME.match(f.name)
        if not match:
            continue
        prefix, suffix = match.groups()
        out = outputs.get(f'{prefix}output{suffix}.txt')
        if out is None:
            continue
        cases.append(TestCase(
            id=len(cases) + 1,
            input=f.content.strip(),
            expected_output=out.content.strip(),
            input_file_name=f.name,
            output_file_name=out.name,
        ))
    return cases
