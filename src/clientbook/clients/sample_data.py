"""Fixed sample clients loaded by the seed operation."""

from typing import List, Tuple

from .client_models import ClientRecord

SAMPLE_CLIENTS: Tuple[Tuple[str, str, str], ...] = (
    ("João Silva", "joao@email.com", "001"),
    ("Maria Santos", "maria@email.com", "002"),
    ("Pedro Oliveira", "pedro@email.com", "003"),
    ("Ana Costa", "ana@email.com", "004"),
    ("Carlos Souza", "carlos@email.com", "005"),
    ("Lucia Ferreira", "lucia@email.com", "006"),
    ("Roberto Lima", "roberto@email.com", "007"),
    ("Patricia Alves", "patricia@email.com", "008"),
    ("Fernando Rocha", "fernando@email.com", "009"),
    ("Juliana Martins", "juliana@email.com", "010"),
    ("Ricardo Pereira", "ricardo@email.com", "011"),
    ("Sandra Gomes", "sandra@email.com", "012"),
    ("Paulo Ribeiro", "paulo@email.com", "013"),
    ("Camila Dias", "camila@email.com", "014"),
    ("Marcos Barbosa", "marcos@email.com", "015"),
    ("Beatriz Castro", "beatriz@email.com", "016"),
    ("Gustavo Mendes", "gustavo@email.com", "017"),
    ("Larissa Cardoso", "larissa@email.com", "018"),
    ("Diego Nascimento", "diego@email.com", "019"),
    ("Vanessa Araújo", "vanessa@email.com", "020"),
)


def sample_records() -> List[ClientRecord]:
    """Fresh records without ids, so every seed appends new rows."""
    return [
        ClientRecord(name=name, email=email, external_ref=ref)
        for name, email, ref in SAMPLE_CLIENTS
    ]
