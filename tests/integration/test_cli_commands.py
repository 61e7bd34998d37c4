"""
Integration tests for Flask CLI commands.
"""


def test_import_csv_command(app, client, tmp_path):
    csv_file = tmp_path / 'customers.csv'
    csv_file.write_text('Name,Phone,Email\nJane,555,jane@example.com\nBob,556,bad\n', encoding='utf-8')

    result = app.test_cli_runner().invoke(args=['import-csv', 'customers', str(csv_file)])

    assert result.exit_code == 0, result.output
    assert '1 customers imported successfully, 1 failed' in result.output
    assert 'Error on row 3: Email must be a valid email address' in result.output
    assert [c['name'] for c in client.get('/api/customers').get_json()] == ['Jane']


def test_import_csv_command_aborts_on_bad_header(app, tmp_path):
    csv_file = tmp_path / 'sellers.csv'
    csv_file.write_text('Nombre\nJane\n', encoding='utf-8')

    result = app.test_cli_runner().invoke(args=['import-csv', 'sellers', str(csv_file)])

    assert result.exit_code == 1
    assert 'Import aborted' in result.output


def test_init_db_command(app):
    result = app.test_cli_runner().invoke(args=['init-db'])

    assert result.exit_code == 0
    assert 'Schema ready.' in result.output
