"""BLE listener bookkeeping, master arbitration and GATT profiles."""