from dataclasses import dataclass, field


@dataclass(frozen=True)
class SubjectKey:
    """Identity of an enrolled subject: subject code plus section code."""

    sigla: str
    grupo: str


@dataclass(frozen=True)
class SubjectRecord:
    """One subject row extracted from a receipt.

    Equality and hashing only look at (sigla, grupo); the descriptive
    columns are whatever the OCR happened to produce.
    """

    sigla: str
    grupo: str
    materia: str = field(compare=False)
    modalidad: str | None = field(default=None, compare=False)
    nivel: str | None = field(default=None, compare=False)
    horario: str | None = field(default=None, compare=False)

    @property
    def key(self) -> SubjectKey:
        return SubjectKey(sigla=self.sigla, grupo=self.grupo)


@dataclass(frozen=True)
class ParsedDocument:
    """Output of the parser for one transcript."""

    is_valid: bool
    registration_number: str
    student_name: str
    subjects: tuple[SubjectRecord, ...] = ()
