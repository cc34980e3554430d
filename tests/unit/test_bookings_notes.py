from travel_checkout.bookings.notes import (
    parse_additional_services,
    parse_coupon_code,
    strip_markers,
)


def test_parse_additional_services_pairs():
    notes = "Chambre calme svp\n[ADDITIONAL_SERVICES:5:2,9:1]"
    sel = parse_additional_services(notes)
    assert [(s.service_id, s.quantity) for s in sel] == [(5, 2), (9, 1)]

def test_parse_additional_services_default_quantity_and_garbage():
    sel = parse_additional_services("[ADDITIONAL_SERVICES:5,abc:2,9:0,11:-1,12:x,13:3]")
    # quantité absente => 1; id non numérique / quantité <= 0 / non entière: ignorés
    assert [(s.service_id, s.quantity) for s in sel] == [(5, 1), (13, 3)]

def test_parse_additional_services_duplicate_first_wins():
    sel = parse_additional_services("[ADDITIONAL_SERVICES:5:2,5:7]")
    assert [(s.service_id, s.quantity) for s in sel] == [(5, 2)]

def test_parse_additional_services_absent():
    assert parse_additional_services("") == []
    assert parse_additional_services(None) == []

def test_parse_coupon_code():
    assert parse_coupon_code("note\n[COUPON_CODE: SUMMER10 ]") == "SUMMER10"
    assert parse_coupon_code("pas de coupon") is None

def test_strip_markers_keeps_customer_text():
    notes = "Arrivée tardive\n[ADDITIONAL_SERVICES:5:2]\n[COUPON_CODE:SUMMER10]"
    assert strip_markers(notes) == "Arrivée tardive"
