from openpyxl import Workbook

import main


def test_search_prints_ranked_results(tmp_path, capsys):
    path = tmp_path / "catalog.xlsx"
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Medicines"
    sheet.append(["Medicine Name", "Units Per Box", "Total Stock Units", "Customer Selling Price"])
    sheet.append(["Amoxiclav", 6, 0, 300])
    sheet.append(["Amoxil", 10, 100, 50])
    workbook.save(path)

    assert main.main(["amox", "--excel", str(path)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("Amoxil")
    assert "not selectable" not in lines[0]
    assert lines[1].startswith("Amoxiclav")
    assert lines[1].endswith("[not selectable]")


def test_template_then_empty_search(tmp_path, capsys):
    path = tmp_path / "template.xlsx"
    assert main.main(["--template", str(path)]) == 0
    assert path.exists()
    assert main.main(["panadol", "--excel", str(path)]) == 0


def test_missing_workbook(tmp_path):
    assert main.main(["x", "--excel", str(tmp_path / "missing.xlsx")]) == 1
