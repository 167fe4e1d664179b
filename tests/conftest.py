import threading

import pytest
from fastapi.testclient import TestClient

from core.data import RecordStore


SAMPLE_ROWS = [
    {"NIM": 220101, "Nama": "Andi Saputra", "Program Studi": "Teknik Informatika", "Dosen Pembimbing Akademik": "Dr. Budi", "Beasiswa": "KIPK"},
    {"NIM": 220102, "Nama": "Siti Aminah", "Program Studi": "Teknik Informatika", "Dosen Pembimbing Akademik": "Dr. Budi", "Beasiswa": "Non KIPK"},
    {"NIM": 220103, "Nama": "Rina Wati", "Program Studi": "Sistem Informasi", "Dosen Pembimbing Akademik": "Ana", "Beasiswa": ""},
    {"NIM": "220104", "Nama": "Dedi Kurniawan", "Program Studi": "", "Dosen Pembimbing Akademik": "ana", "Beasiswa": "KIPK"},
    {"NIM": 220105, "Nama": "Eka Putri", "Program Studi": "Sistem Informasi", "Dosen Pembimbing Akademik": None, "Beasiswa": "Bidikmisi"},
    {"NIM": 220106, "Nama": "Fajar Nugroho", "Program Studi": "Komputerisasi Akuntansi", "Dosen Pembimbing Akademik": "Dr. Budi", "Beasiswa": "Non KIPK"},
]


def make_rows(n, **fields):
    return [
        {"NIM": 230000 + i, "Nama": f"Mahasiswa {i:02d}", "Program Studi": "Teknik Informatika", "Dosen Pembimbing Akademik": "Dr. Budi", "Beasiswa": "KIPK", **fields}
        for i in range(1, n + 1)
    ]


@pytest.fixture
def sample_rows():
    return [dict(r) for r in SAMPLE_ROWS]


@pytest.fixture
def store(sample_rows):
    return RecordStore(sample_rows)


@pytest.fixture
def records(store):
    return store.get_all()


@pytest.fixture
def api_client(sample_rows):
    from api.main import app

    app.state.store = RecordStore()
    app.state.fetch = lambda: [dict(r) for r in sample_rows]
    app.state.last_outcome = None
    app.state.refresh_lock = threading.Lock()
    with TestClient(app) as client:
        yield client
