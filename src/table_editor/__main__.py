from table_editor.cli import app

app()
