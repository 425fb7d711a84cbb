from pathlib import Path
import json
import sys

from errors import AlreadyExists, InvalidArgument, IoError, NotFound

SCRIPTS_DIR = Path("internal/components/scripts")

TEMPLATE = """package scripts

import "test3d/internal/engine"

type {{NAME}} struct {
	engine.BaseComponent
	Speed float32
}

func (s *{{NAME}}) Update(deltaTime float32) {
	g := s.GetGameObject()
	if g == nil {
		return
	}
	// TODO: implement behavior
}

func init() {
	engine.RegisterScript("{{NAME}}", {{LOWER}}Factory, {{LOWER}}Serializer)
}

func {{LOWER}}Factory(props map[string]any) engine.Component {
	speed := float32(1)
	if v, ok := props["speed"].(float64); ok {
		speed = float32(v)
	}
	return &{{NAME}}{Speed: speed}
}

func {{LOWER}}Serializer(c engine.Component) map[string]any {
	s, ok := c.(*{{NAME}})
	if !ok {
		return nil
	}
	return map[string]any{
		"speed": s.Speed,
	}
}
"""


def to_snake_case(name: str) -> str:
    result = ""
    for i, c in enumerate(name):
        if c.isupper() and i > 0:
            result += "_"
        result += c.lower()
    return result


def render_template(name: str) -> str:
    lower = name[0].lower() + name[1:]
    return TEMPLATE.replace("{{NAME}}", name).replace("{{LOWER}}", lower)


def create_script(name: str, scripts_dir=SCRIPTS_DIR) -> Path:
    """
    Vytvoří nový Go skript komponenty ze šablony.

    :param name: název typu komponenty, musí začínat velkým písmenem (např. EnemyChaser).
    :param scripts_dir: adresář se skripty, relativně k aktuálnímu adresáři.
    :return: cesta k vytvořenému souboru.
    """
    if not name or not name[0].isupper():
        raise InvalidArgument("script name must start with an uppercase letter")

    scripts_dir = Path(scripts_dir)
    if not scripts_dir.is_dir():
        raise NotFound(f"scripts directory not found: {scripts_dir} (run from the project root)")

    out_path = scripts_dir / (to_snake_case(name) + ".go")
    if out_path.exists():
        raise AlreadyExists(f"{out_path} already exists")

    try:
        out_path.write_text(render_template(name), encoding="utf-8")
    except OSError as e:
        raise IoError(f"error writing file {out_path}: {e}") from e

    print(f"Created {out_path}")
    print(f"Script \"{name}\" registered. Add it to a scene object:\n")

    # Ukázka objektu do scény
    snippet = {"type": "Script", "name": name, "props": {"speed": 1.0}}
    print("  " + json.dumps(snippet, indent=2).replace("\n", "\n  "))

    return out_path


if __name__ == "__main__":

    if len(sys.argv) < 2:
        print("Usage: python newscript.py <ScriptName>")
    else:
        create_script(sys.argv[1])
