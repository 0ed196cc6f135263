"""Serial console framing and transport."""