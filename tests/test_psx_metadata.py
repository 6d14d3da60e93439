import io

import pytest

from emuident.psx import metadata

from tests.helpers import ps1_image


@pytest.mark.parametrize("layout", ["cooked", "raw", "subchannel"])
def test_get_psx_serial_layouts(layout):
    fp = io.BytesIO(ps1_image(layout=layout))
    assert metadata.get_psx_serial(fp) == "SLUS-00594"


def test_get_psx_serial_without_system_cnf():
    fp = io.BytesIO(ps1_image(with_cnf=False))
    assert metadata.get_psx_serial(fp) is None


def test_get_psx_serial_not_an_iso():
    assert metadata.get_psx_serial(io.BytesIO(b"no serial here")) is None
    assert metadata.get_psx_serial(io.BytesIO(b"")) is None


def test_get_psx_serial_pal_disc():
    fp = io.BytesIO(ps1_image(b"BOOT=cdrom:\\SCES_003.44;1\nTCB=4\n", layout="raw"))
    assert metadata.get_psx_serial(fp) == "SCES-00344"


@pytest.mark.parametrize(
    "cnf, expected",
    [
        (b"BOOT = cdrom:\\SLUS_005.94;1\r\nTCB = 4\r\n", "SLUS-00594"),
        (b"BOOT=cdrom:SCES_012.34;1", "SCES-01234"),
        (b"boot = cdrom0:\\SLPS_018.17;1", "SLPS-01817"),
        (b"BOOT = cdrom:\\PSX\\SLES_123.45;1", "SLES-12345"),
        (b"BOOT = cdrom:\\SLUS00594;1", "SLUS-00594"),
        (b"TCB = 4\r\nEVENT = 10\r\n", None),
        (b"BOOT = cdrom:\\A;1", None),
        (b"BOOT = cdrom:\\ABCD_;1", None),
    ],
)
def test_parse_boot_line(cnf, expected):
    assert metadata.parse_boot_line(cnf) == expected


def test_idempotent():
    fp = io.BytesIO(ps1_image(layout="raw"))
    assert metadata.get_psx_serial(fp) == metadata.get_psx_serial(fp)
