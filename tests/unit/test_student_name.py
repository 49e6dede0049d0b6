from enrollment_ingest.parsing.student_name import (
    extract_student_name,
    is_noise,
    name_before_career,
    name_before_id_suffix,
    name_in_table_row,
    name_on_next_line,
)


class TestNameStrategies:
    def test_name_before_career_keyword(self) -> None:
        text = "223456789 Juan Perez Lopez INGENIERIA INFORMATICA"
        assert name_before_career(text) == "Juan Perez Lopez"

    def test_name_in_table_row(self) -> None:
        text = "| 248112233 | | Vargas Cruz Camila 5192837-SCZ |"
        assert name_in_table_row(text) == "Vargas Cruz Camila"

    def test_name_before_id_suffix(self) -> None:
        text = "Alumno: Vargas Cruz Camila 5192837-SCZ"
        assert name_before_id_suffix(text) == "Vargas Cruz Camila"

    def test_name_on_next_line(self) -> None:
        text = "223456789\nJuan Perez Lopez\n"
        assert name_on_next_line(text) == "Juan Perez Lopez"

    def test_next_line_rejects_header_words(self) -> None:
        text = "223456789\nMODALIDAD PRESENCIAL\n"
        assert name_on_next_line(text) is None

    def test_strategy_returns_none_when_absent(self) -> None:
        assert name_in_table_row("no table here") is None


class TestIsNoise:
    def test_header_vocabulary_is_noise(self) -> None:
        assert is_noise("Periodo Normal")
        assert is_noise("CARRERA INGENIERIA INFORMATICA")

    def test_person_name_is_not_noise(self) -> None:
        assert not is_noise("Maria Gomez Rojas")

    def test_word_boundaries_are_respected(self) -> None:
        assert not is_noise("Normalia Originales")


class TestExtractStudentName:
    def test_uses_first_successful_strategy(self) -> None:
        text = "223456789 Juan Perez Lopez INGENIERIA INFORMATICA\nOtro Nombre 5192837-SCZ"
        assert extract_student_name(text) == "Juan Perez Lopez"

    def test_falls_back_to_id_suffix(self) -> None:
        assert extract_student_name("Alumno: Vargas Cruz Camila 5192837-SCZ") == (
            "Vargas Cruz Camila"
        )

    def test_last_resort_capitalized_words(self) -> None:
        assert extract_student_name("Boleta\nMARIA GOMEZ ROJAS\nfin") == "MARIA GOMEZ ROJAS"

    def test_collapses_whitespace(self) -> None:
        assert extract_student_name("223456789\nJuan   Perez  Lopez\n") == "Juan Perez Lopez"

    def test_header_only_text_yields_none(self) -> None:
        assert extract_student_name("CARRERA INGENIERIA INFORMATICA") is None
