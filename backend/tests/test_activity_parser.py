"""Parsing of free-form generated activity text into a GeneratedActivity."""

import pytest

from aula.activity_parser import (
    DEFAULT_MATERIALS,
    DEFAULT_NAME,
    DEFAULT_OBJECTIVE,
    FALLBACK_STEPS,
    parse_activity_text,
)


def assert_complete(activity):
    assert activity.name.strip()
    assert activity.objective.strip()
    assert activity.materials and all(m.strip() for m in activity.materials)
    assert activity.development.steps
    assert all(s.description.strip() for s in activity.development.steps)


@pytest.mark.parametrize("text", [
    "",
    "   \n\t  ",
    None,
    "texto sin ninguna etiqueta reconocible",
    "Nombre:   \nObjetivo:   \nMateriales:\n\nDesarrollo:",
    "((((  ))) Paso Paso 1: (",
])
def test_always_returns_complete_activity(text):
    assert_complete(parse_activity_text(text))


def test_empty_text_uses_every_fallback():
    activity = parse_activity_text("")
    assert activity.name == DEFAULT_NAME
    assert activity.objective == DEFAULT_OBJECTIVE
    assert activity.materials == DEFAULT_MATERIALS
    assert [(s.description, s.duration) for s in activity.development.steps] == list(FALLBACK_STEPS)
    assert activity.development.description == ""


class TestName:

    def test_label_wins(self):
        assert parse_activity_text("Nombre: Foo\nObjetivo: Bar").name == "Foo"

    def test_heading_when_no_label(self):
        assert parse_activity_text("# Foo\nObjetivo: Bar").name == "Foo"

    def test_label_beats_heading(self):
        assert parse_activity_text("# Encabezado\nTítulo: Real\nObjetivo: Bar").name == "Real"

    def test_labels_are_case_insensitive(self):
        assert parse_activity_text("NOMBRE: Grande").name == "Grande"
        assert parse_activity_text("actividad: Pequeña").name == "Pequeña"

    def test_first_line_when_nothing_else(self):
        assert parse_activity_text("\n\n  Juego de memoria  \nMás texto").name == "Juego de memoria"

    def test_blank_label_falls_through(self):
        assert parse_activity_text("Nombre:   \n# Rescate").name == "Rescate"

    def test_emphasised_label(self):
        assert parse_activity_text("**Nombre:** Mapa Visual").name == "Mapa Visual"
        assert parse_activity_text("**Nombre: Mapa Visual**").name == "Mapa Visual"
        assert parse_activity_text("## Título: Eco").name == "Eco"


class TestObjective:

    def test_bounded_by_next_section(self):
        text = "Objetivo: Leer con fluidez\ny comprender\nMateriales:\n- Libro"
        assert parse_activity_text(text).objective == "Leer con fluidez\ny comprender"

    def test_plural_and_accented_labels(self):
        assert parse_activity_text("Objetivos: Contar").objective == "Contar"
        assert parse_activity_text("Propósito: Escuchar").objective == "Escuchar"

    def test_whitespace_only_value_is_a_miss(self):
        assert parse_activity_text("Objetivo:    \nMateriales:\n- A").objective == DEFAULT_OBJECTIVE

    def test_mid_sentence_label_is_not_a_section(self):
        text = "El objetivo: no es este\nNombre: X"
        assert parse_activity_text(text).objective == DEFAULT_OBJECTIVE


class TestMaterials:

    def test_dash_list(self):
        assert parse_activity_text("Materiales:\n- A\n- B\nDesarrollo: ...").materials == ["A", "B"]

    def test_mixed_bullets_and_numbers(self):
        text = "Recursos:\n• Tijeras\n* Pegamento\n1. Cartulina\n2. Colores\nPasos:\n"
        assert parse_activity_text(text).materials == ["Tijeras", "Pegamento", "Cartulina", "Colores"]

    def test_empty_block_uses_placeholder(self):
        assert parse_activity_text("Materiales:\n\nDesarrollo:\n").materials == DEFAULT_MATERIALS

    def test_inline_value_is_kept(self):
        assert parse_activity_text("Materiales: Pizarra").materials == ["Pizarra"]


class TestDevelopment:

    def test_numbered_steps_with_durations(self):
        text = "Desarrollo:\nPaso 1: Haz X (10-15 minutos)\nPaso 2: Haz Y (20 minutos)"
        steps = parse_activity_text(text).development.steps
        assert [(s.description, s.duration) for s in steps] == [
            ("Haz X", "10-15 minutos"),
            ("Haz Y", "20 minutos"),
        ]

    def test_description_prefix_before_first_step(self):
        text = (
            "Desarrollo:\nTrabajo en parejas con apoyo visual.\n\n"
            "1. Presentar las tarjetas (5 minutos)\n"
            "2: Formar parejas (10 minutos)"
        )
        development = parse_activity_text(text).development
        assert development.description == "Trabajo en parejas con apoyo visual."
        assert [s.description for s in development.steps] == ["Presentar las tarjetas", "Formar parejas"]

    def test_no_steps_yields_skeleton(self):
        steps = parse_activity_text("Desarrollo:\nUna sola descripción sin pasos").development.steps
        assert [(s.description, s.duration) for s in steps] == list(FALLBACK_STEPS)

    def test_paragraphs_become_steps(self):
        text = "Desarrollo:\nPrimero leemos el cuento (10 minutos)\n\nLuego dibujamos la escena\n\nAl final compartimos"
        steps = parse_activity_text(text).development.steps
        assert [(s.description, s.duration) for s in steps] == [
            ("Primero leemos el cuento", "10 minutos"),
            ("Luego dibujamos la escena", "20-25 minutos"),
            ("Al final compartimos", "30-35 minutos"),
        ]

    def test_paragraphs_starting_with_paso_are_dropped(self):
        text = "Desarrollo:\nPaso uno sin formato\n\nExplorar el material\n\nCerrar la sesión"
        steps = parse_activity_text(text).development.steps
        assert [s.description for s in steps] == ["Explorar el material", "Cerrar la sesión"]
        assert [s.duration for s in steps] == ["10-15 minutos", "20-25 minutos"]

    def test_structured_steps_take_precedence_over_paragraphs(self):
        text = "Desarrollo:\nPaso 1: Leer (5 minutos)\n\nPaso 2: Escribir (10 minutos)\n\nOtro párrafo"
        steps = parse_activity_text(text).development.steps
        assert [s.description for s in steps] == ["Leer", "Escribir"]

    def test_without_development_header_uses_skeleton(self):
        steps = parse_activity_text("Paso 1: Leer (5 minutos)").development.steps
        assert len(steps) == 3

    def test_step_description_wraps_onto_next_lines(self):
        text = (
            "Desarrollo:\n"
            "Paso 1: Introducción\nEl docente presenta las tarjetas (10-15 minutos)\n"
            "Paso 2: Práctica\nLos alumnos trabajan en parejas (20 minutos)"
        )
        steps = parse_activity_text(text).development.steps
        assert [(s.description, s.duration) for s in steps] == [
            ("Introducción El docente presenta las tarjetas", "10-15 minutos"),
            ("Práctica Los alumnos trabajan en parejas", "20 minutos"),
        ]

    def test_step_without_duration_does_not_swallow_the_next(self):
        text = "Desarrollo:\nPaso 1: Saludo inicial\nPaso 2: Lectura compartida\ndel cuento (15 minutos)"
        steps = parse_activity_text(text).development.steps
        assert [(s.description, s.duration) for s in steps] == [("Lectura compartida del cuento", "15 minutos")]

    def test_closing_parenthesis_inside_description(self):
        text = "Desarrollo:\nPaso 1: Repasar los puntos a) y b) del tema (10 minutos)"
        steps = parse_activity_text(text).development.steps
        assert [s.description for s in steps] == ["Repasar los puntos a) y b) del tema"]

    def test_bold_step_markers(self):
        text = "Desarrollo:\n**Paso 1:** Leer (5 minutos)\n**Paso 2:** Dibujar (10 minutos)"
        steps = parse_activity_text(text).development.steps
        assert [(s.description, s.duration) for s in steps] == [("Leer", "5 minutos"), ("Dibujar", "10 minutos")]


def test_end_to_end():
    text = (
        "Nombre: Mapa Visual\n"
        "Objetivo: Mejorar comprensión\n"
        "Materiales:\n- Papel\n- Marcadores\n"
        "Desarrollo:\n"
        "Paso 1: Introducir el tema (10-15 minutos)\n"
        "Paso 2: Crear el mapa (20-30 minutos)"
    )
    activity = parse_activity_text(text)
    assert activity.name == "Mapa Visual"
    assert activity.objective == "Mejorar comprensión"
    assert activity.materials == ["Papel", "Marcadores"]
    assert activity.development.model_dump()["steps"] == [
        {"description": "Introducir el tema", "duration": "10-15 minutos"},
        {"description": "Crear el mapa", "duration": "20-30 minutos"},
    ]


def test_windows_line_endings():
    activity = parse_activity_text("Nombre: Eco\r\nObjetivo: Oír\r\nMateriales:\r\n- Radio\r\n")
    assert activity.name == "Eco"
    assert activity.objective == "Oír"
    assert activity.materials == ["Radio"]


@pytest.mark.parametrize("bold", ["**{}:**", "**{}**:"])
def test_end_to_end_with_markdown_labels(bold):
    text = "\n".join([
        bold.format("Nombre") + " Mapa Visual",
        bold.format("Objetivo") + " Mejorar comprensión",
        bold.format("Materiales"),
        "- Papel",
        "- Marcadores",
        bold.format("Desarrollo"),
        "Paso 1: Introducir el tema (10-15 minutos)",
        "Paso 2: Crear el mapa (20-30 minutos)",
    ])
    activity = parse_activity_text(text)
    assert activity.name == "Mapa Visual"
    assert activity.objective == "Mejorar comprensión"
    assert activity.materials == ["Papel", "Marcadores"]
    assert [(s.description, s.duration) for s in activity.development.steps] == [
        ("Introducir el tema", "10-15 minutos"),
        ("Crear el mapa", "20-30 minutos"),
    ]
