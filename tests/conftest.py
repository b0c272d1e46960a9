import pytest

SPANISH_HEADER = "Nivel,ID,Nombre,Descripción,Ud,%IVA,PVP"

VALID_CSV = "\n".join([
    SPANISH_HEADER,
    "Capítulo,1,Instalaciones Eléctricas,,,,",
    "Subcapítulo,1.1,Cableado Estructurado,,,,",
    "Apartado,1.1.1,Cableado de Baja Tensión,,,,",
    'Partida,1.1.1.1,Instalación de Cable UTP Cat6,"Cable UTP, categoría 6",m,21,"15,50"',
    "Capítulo,2,Fontanería,,,,",
    "Partida,2.1,Instalación de Tubería PEX,,m,10,12.3",
]) + "\n"


def build_csv(*rows, header=SPANISH_HEADER):
    return "\n".join((header,) + rows) + "\n"


@pytest.fixture
def valid_csv():
    return VALID_CSV
